from .product import AdminProductViewSet, CategoryListView, PublicProductViewSet

__all__ = ["AdminProductViewSet", "CategoryListView", "PublicProductViewSet"]
