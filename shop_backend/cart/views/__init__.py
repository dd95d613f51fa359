from .cart import (
    CartItemCustomizationsView,
    CartItemDetailView,
    CartItemNonRefundableView,
    CartItemsView,
    CartView,
)

__all__ = [
    "CartItemCustomizationsView",
    "CartItemDetailView",
    "CartItemNonRefundableView",
    "CartItemsView",
    "CartView",
]
