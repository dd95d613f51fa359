from .equipment import MaterialSerializer, PrinterSerializer
from .queue import QueueItemSerializer, QueueItemUpdateSerializer

__all__ = [
    "MaterialSerializer",
    "PrinterSerializer",
    "QueueItemSerializer",
    "QueueItemUpdateSerializer",
]
