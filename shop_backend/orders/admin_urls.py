# orders/admin_urls.py

"""
Back-office order routes, mounted under /api/admin/.
"""

from django.urls import path

from orders.views import (
    AdminOrderDetailView,
    AdminOrderListView,
    AdminOrderStatusView,
    AdminStatsView,
)

urlpatterns = [
    path("orders/", AdminOrderListView.as_view(), name="admin-orders"),
    path("orders/<uuid:order_id>/", AdminOrderDetailView.as_view(), name="admin-order-detail"),
    path(
        "orders/<uuid:order_id>/status/",
        AdminOrderStatusView.as_view(),
        name="admin-order-status",
    ),
    path("stats/", AdminStatsView.as_view(), name="admin-stats"),
]
