# catalog/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from catalog.views import CategoryListView, PublicProductViewSet

router = SimpleRouter()
router.register(r"", PublicProductViewSet, basename="products")

urlpatterns = [
    path("categories/", CategoryListView.as_view(), name="product-categories"),
    path("", include(router.urls)),
]
