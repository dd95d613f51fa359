from .checkout import (
    CheckoutConfigSerializer,
    CheckoutInputSerializer,
    CheckoutLineInputSerializer,
    CheckoutResponseSerializer,
)
from .order import (
    AdminOrderSerializer,
    AdminOrderUpdateSerializer,
    OrderSerializer,
    OrderStatusEventSerializer,
    OrderStatusSerializer,
    OrderStatusUpdateSerializer,
    RefundRequestSerializer,
)

__all__ = [
    "AdminOrderSerializer",
    "AdminOrderUpdateSerializer",
    "CheckoutConfigSerializer",
    "CheckoutInputSerializer",
    "CheckoutLineInputSerializer",
    "CheckoutResponseSerializer",
    "OrderSerializer",
    "OrderStatusEventSerializer",
    "OrderStatusSerializer",
    "OrderStatusUpdateSerializer",
    "RefundRequestSerializer",
]
