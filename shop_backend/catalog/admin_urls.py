# catalog/admin_urls.py

"""
Back-office product routes, mounted under /api/admin/.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from catalog.views import AdminProductViewSet

router = SimpleRouter()
router.register(r"products", AdminProductViewSet, basename="admin-products")

urlpatterns = [
    path("", include(router.urls)),
]
