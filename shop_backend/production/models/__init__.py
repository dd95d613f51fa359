from .material import Material
from .printer import Printer
from .queue_item import ProductionQueueItem

__all__ = ["Material", "Printer", "ProductionQueueItem"]
