from .order import Order
from .payment_event import PaymentEvent
from .status_event import OrderStatusEvent

__all__ = ["Order", "OrderStatusEvent", "PaymentEvent"]
