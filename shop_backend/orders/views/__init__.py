from .admin import AdminOrderDetailView, AdminOrderListView, AdminOrderStatusView, AdminStatsView
from .checkout import CheckoutConfigView, CreatePaymentIntentView
from .customer import MyOrdersView, OrderDetailView, RefundRequestView
from .webhook import StripeWebhookView

__all__ = [
    "AdminOrderDetailView",
    "AdminOrderListView",
    "AdminOrderStatusView",
    "AdminStatsView",
    "CheckoutConfigView",
    "CreatePaymentIntentView",
    "MyOrdersView",
    "OrderDetailView",
    "RefundRequestView",
    "StripeWebhookView",
]
