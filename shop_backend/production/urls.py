# production/urls.py

"""
Back-office production routes, mounted under /api/admin/production/.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from production.views import (
    MaterialViewSet,
    PrinterViewSet,
    ProductionQueueItemView,
    ProductionQueueView,
)

router = SimpleRouter()
router.register(r"printers", PrinterViewSet, basename="printers")
router.register(r"materials", MaterialViewSet, basename="materials")

urlpatterns = [
    path("queue/", ProductionQueueView.as_view(), name="production-queue"),
    path("queue/<uuid:item_id>/", ProductionQueueItemView.as_view(), name="production-queue-item"),
    path("", include(router.urls)),
]
