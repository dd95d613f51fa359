from .equipment import MaterialViewSet, PrinterViewSet
from .queue import ProductionQueueItemView, ProductionQueueView

__all__ = [
    "MaterialViewSet",
    "PrinterViewSet",
    "ProductionQueueItemView",
    "ProductionQueueView",
]
