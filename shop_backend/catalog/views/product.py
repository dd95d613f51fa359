# catalog/views/product.py

"""
PRODUCT VIEWS

Public:
- GET /api/products/                  active products (?category=, ?search=)
- GET /api/products/<id>/             detail
- GET /api/products/categories/       distinct categories of active products

Admin:
- /api/admin/products/                CRUD (admin role)
"""

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from catalog.filters import ProductFilter
from catalog.models import Product
from catalog.serializers import ProductAdminSerializer, ProductSerializer
from users.permissions import IsAdmin

logger = logging.getLogger(__name__)


class PublicCatalogThrottle(AnonRateThrottle):
    scope = "public_catalog"


class PublicProductViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicCatalogThrottle]
    filterset_class = ProductFilter

    def get_queryset(self):
        return Product.objects.filter(is_active=True).order_by("-created_at")

    @extend_schema(
        tags=["Public"],
        parameters=[
            OpenApiParameter(name="category", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY),
        ],
        description="Public product catalog (AllowAny).",
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(tags=["Public"], responses={200: ProductSerializer, 404: OpenApiResponse()})
    def retrieve(self, request, *args, **kwargs):
        return super().retrieve(request, *args, **kwargs)


class CategoryListView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(tags=["Public"], responses={200: OpenApiResponse(description="Category names")})
    def get(self, request):
        categories = (
            Product.objects.filter(is_active=True)
            .order_by("category")
            .values_list("category", flat=True)
            .distinct()
        )
        return Response({"results": list(categories)}, status=status.HTTP_200_OK)


class AdminProductViewSet(viewsets.ModelViewSet):
    serializer_class = ProductAdminSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    filterset_class = ProductFilter

    def get_queryset(self):
        return Product.objects.all().order_by("-created_at")

    def perform_create(self, serializer):
        product = serializer.save()
        logger.info(
            "Product created",
            extra={"product_id": str(product.id), "user_id": str(self.request.user.id)},
        )

    def perform_update(self, serializer):
        product = serializer.save()
        logger.info(
            "Product updated",
            extra={"product_id": str(product.id), "user_id": str(self.request.user.id)},
        )

    def destroy(self, request, *args, **kwargs):
        # Orders keep frozen snapshots, so deactivating is enough to hide it
        product = self.get_object()
        product.is_active = False
        product.save(update_fields=["is_active", "updated_at"])
        logger.info("Product deactivated", extra={"product_id": str(product.id)})
        return Response(status=status.HTTP_204_NO_CONTENT)
