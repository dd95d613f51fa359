from .product import DEFAULT_CATEGORY, Product

__all__ = ["DEFAULT_CATEGORY", "Product"]
