# production/views/equipment.py

import logging

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from production.models import Material, Printer
from production.serializers import MaterialSerializer, PrinterSerializer
from users.permissions import IsProductionStaff

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(tags=["Admin - Production"]),
    retrieve=extend_schema(tags=["Admin - Production"]),
    create=extend_schema(tags=["Admin - Production"]),
    update=extend_schema(tags=["Admin - Production"]),
    partial_update=extend_schema(tags=["Admin - Production"]),
    destroy=extend_schema(tags=["Admin - Production"]),
)
class PrinterViewSet(viewsets.ModelViewSet):
    serializer_class = PrinterSerializer
    permission_classes = [IsAuthenticated, IsProductionStaff]
    filterset_fields = ["status"]

    def get_queryset(self):
        return Printer.objects.all().order_by("name")

    def perform_create(self, serializer):
        printer = serializer.save()
        logger.info("Printer created", extra={"printer_id": str(printer.id)})

    def perform_destroy(self, instance):
        # queue entries keep their row, printer reference becomes NULL
        logger.info("Printer deleted", extra={"printer_id": str(instance.id)})
        instance.delete()


@extend_schema_view(
    list=extend_schema(tags=["Admin - Production"]),
    retrieve=extend_schema(tags=["Admin - Production"]),
    create=extend_schema(tags=["Admin - Production"]),
    update=extend_schema(tags=["Admin - Production"]),
    partial_update=extend_schema(tags=["Admin - Production"]),
    destroy=extend_schema(tags=["Admin - Production"]),
)
class MaterialViewSet(viewsets.ModelViewSet):
    serializer_class = MaterialSerializer
    permission_classes = [IsAuthenticated, IsProductionStaff]
    filterset_fields = ["type", "is_active"]

    def get_queryset(self):
        return Material.objects.all().order_by("type", "name")

    def destroy(self, request, *args, **kwargs):
        material = self.get_object()
        material.is_active = False
        material.save(update_fields=["is_active", "updated_at"])
        logger.info("Material deactivated", extra={"material_id": str(material.id)})
        return Response(status=status.HTTP_204_NO_CONTENT)
