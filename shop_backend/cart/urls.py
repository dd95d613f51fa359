# cart/urls.py

from django.urls import path

from cart.views import (
    CartItemCustomizationsView,
    CartItemDetailView,
    CartItemNonRefundableView,
    CartItemsView,
    CartView,
)

app_name = "cart"

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("items/", CartItemsView.as_view(), name="cart-items"),
    path("items/<str:cart_item_id>/", CartItemDetailView.as_view(), name="cart-item"),
    path(
        "items/<str:cart_item_id>/customizations/",
        CartItemCustomizationsView.as_view(),
        name="cart-item-customizations",
    ),
    path(
        "items/<str:cart_item_id>/non-refundable/",
        CartItemNonRefundableView.as_view(),
        name="cart-item-non-refundable",
    ),
]
