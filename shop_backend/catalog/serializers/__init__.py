from .product import ProductAdminSerializer, ProductSerializer

__all__ = ["ProductAdminSerializer", "ProductSerializer"]
