# production/views/queue.py

"""
PRODUCTION QUEUE VIEWS (mounted under /api/admin/production/)

- GET queue/                 open entries, priority desc then oldest first
                             (?status=<status>, ?include_closed=1)
- PUT queue/<id>/            assignments, priority, notes, sub-status
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import domain_error_response
from core.exceptions import ShopError
from production.serializers import QueueItemSerializer, QueueItemUpdateSerializer
from production.services.queue import queue_queryset, update_queue_item
from users.permissions import IsProductionStaff


def _truthy(value) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes"}


class ProductionQueueView(generics.ListAPIView):
    serializer_class = QueueItemSerializer
    permission_classes = [IsAuthenticated, IsProductionStaff]
    filter_backends = []

    def get_queryset(self):
        params = self.request.query_params
        return queue_queryset(
            include_closed=_truthy(params.get("include_closed")),
            status=(params.get("status") or "").strip() or None,
        )

    @extend_schema(
        tags=["Admin - Production"],
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="include_closed", type=bool, location=OpenApiParameter.QUERY),
        ],
        responses={200: QueueItemSerializer(many=True)},
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class ProductionQueueItemView(APIView):
    permission_classes = [IsAuthenticated, IsProductionStaff]

    @extend_schema(
        tags=["Admin - Production"],
        request=QueueItemUpdateSerializer,
        responses={
            200: QueueItemSerializer,
            400: OpenApiResponse(description="Invalid status change or unknown reference"),
            404: OpenApiResponse(description="Not found"),
        },
    )
    def put(self, request, item_id):
        ser = QueueItemUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        try:
            item = update_queue_item(item_id=item_id, data=ser.validated_data, actor=request.user)
        except ShopError as exc:
            return domain_error_response(exc)

        return Response(QueueItemSerializer(item).data, status=status.HTTP_200_OK)

    def patch(self, request, item_id):
        return self.put(request, item_id)
