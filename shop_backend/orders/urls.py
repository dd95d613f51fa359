# orders/urls.py

"""
Customer order routes, mounted under /api/orders/.
"""

from django.urls import path

from orders.views import MyOrdersView, OrderDetailView, RefundRequestView

urlpatterns = [
    path("", MyOrdersView.as_view(), name="my-orders"),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path(
        "<uuid:order_id>/refund-request/",
        RefundRequestView.as_view(),
        name="order-refund-request",
    ),
]
