# orders/services/order_transitions.py

"""
ORDER STATUS TRANSITIONS (THE ONLY WRITER OF Order.status)

transition_order() runs one atomic unit:
1) lock the order row (select_for_update)
2) optional read-check-write guard (expected_status -> ConflictError)
3) lifecycle rules (orders.services.order_lifecycle)
4) data preconditions (note, tracking number, refundability)
5) apply status + timestamps, side effects (production queue)
6) audit row (OrderStatusEvent)
7) customer emails scheduled for after commit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from core.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from orders.models import Order, OrderStatusEvent
from orders.services import order_lifecycle as lifecycle
from orders.services.notifications import schedule_order_email
from production.services.queue import cancel_open_items, create_queue_for_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    order: Order
    from_status: str
    to_status: str
    emails: tuple = ()
    production_items_created: int = 0
    production_items_cancelled: int = 0


def _check_preconditions(*, order: Order, to_status: str, source: str, note: str, tracking_number):
    if to_status == lifecycle.AWAITING_INFO and not (note or "").strip():
        raise InvalidTransitionError(
            from_status=order.status,
            to_status=to_status,
            reason="a note for the customer is required",
        )

    if to_status == lifecycle.SHIPPED:
        tracking = (tracking_number or "").strip() or (order.tracking_number or "").strip()
        if not tracking:
            raise InvalidTransitionError(
                from_status=order.status,
                to_status=to_status,
                reason="a tracking number is required",
            )

    if (
        to_status == lifecycle.REFUND_REQUESTED
        and source == lifecycle.CUSTOMER
        and order.all_items_non_refundable
    ):
        raise InvalidTransitionError(
            from_status=order.status,
            to_status=to_status,
            reason="all items in this order are non-refundable",
        )


def _emails_for(*, order: Order, to_status: str) -> list[str]:
    kinds = []

    kind = lifecycle.NOTIFY_ON_FIRST_ARRIVAL.get(to_status)
    ts_field = lifecycle.TIMESTAMP_FIELDS.get(to_status)
    if kind and not (ts_field and getattr(order, ts_field)):
        kinds.append(kind)

    kind = lifecycle.NOTIFY_ON_EVERY_ARRIVAL.get(to_status)
    if kind:
        kinds.append(kind)

    return kinds


@transaction.atomic
def transition_order(
    *,
    order_id,
    to_status: str,
    expected_status: str | None = None,
    actor=None,
    source: str = lifecycle.ADMIN,
    note: str = "",
    tracking_number: str | None = None,
) -> TransitionResult:
    order = Order.objects.select_for_update().filter(id=order_id).first()
    if order is None:
        raise NotFoundError("Order not found")

    from_status = order.status

    if expected_status and expected_status != from_status:
        raise ConflictError(
            f"Order status changed: expected '{expected_status}', found '{from_status}'"
        )

    lifecycle.validate_transition(from_status=from_status, to_status=to_status, source=source)
    _check_preconditions(
        order=order,
        to_status=to_status,
        source=source,
        note=note,
        tracking_number=tracking_number,
    )

    emails = _emails_for(order=order, to_status=to_status)
    now = timezone.now()
    touched = ["status", "updated_at"]

    order.status = to_status

    ts_field = lifecycle.TIMESTAMP_FIELDS.get(to_status)
    if ts_field and not getattr(order, ts_field):
        setattr(order, ts_field, now)
        touched.append(ts_field)

    if to_status == lifecycle.AWAITING_INFO:
        order.status_note = note.strip()
        touched.append("status_note")
    elif from_status == lifecycle.AWAITING_INFO:
        order.status_note = ""
        touched.append("status_note")

    if to_status == lifecycle.SHIPPED and (tracking_number or "").strip():
        order.tracking_number = tracking_number.strip()
        touched.append("tracking_number")

    order.save(update_fields=touched)

    created = 0
    cancelled = 0
    if to_status == lifecycle.PROCESSING and from_status == lifecycle.PAID:
        created = len(create_queue_for_order(order))
    if to_status == lifecycle.CANCELLED:
        cancelled = cancel_open_items(order)

    OrderStatusEvent.objects.create(
        order=order,
        from_status=from_status,
        to_status=to_status,
        actor=actor if getattr(actor, "is_authenticated", False) else None,
        source=source,
        note=(note or "").strip(),
    )

    for kind in emails:
        schedule_order_email(kind=kind, order=order)

    logger.info(
        "Order status changed",
        extra={
            "order_id": str(order.id),
            "from_status": from_status,
            "to_status": to_status,
            "source": source,
        },
    )

    return TransitionResult(
        order=order,
        from_status=from_status,
        to_status=to_status,
        emails=tuple(emails),
        production_items_created=created,
        production_items_cancelled=cancelled,
    )
