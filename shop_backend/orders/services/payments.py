# orders/services/payments.py

"""
PAYMENT EVENT PROCESSING (IDEMPOTENT)

Gateway events are applied at most once:
- the PaymentEvent row (unique event_id) is inserted FIRST inside the
  transaction; a replay hits the unique constraint and does nothing
- payment_intent.succeeded moves a pending order to paid (source=payment)
  after the charged amount/currency is checked against the order
- payment_intent.payment_failed is recorded; the order stays pending
- an order that is no longer pending is left alone (no transition, no email)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.db import IntegrityError, transaction

from core.money import from_minor_units, to_minor_units
from orders.models import Order, PaymentEvent
from orders.services import order_lifecycle as lifecycle
from orders.services.order_transitions import transition_order

logger = logging.getLogger(__name__)

EVENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_FAILED = "payment_intent.payment_failed"


@dataclass(frozen=True)
class PaymentEventResult:
    event_id: str
    outcome: str
    detail: str
    duplicate: bool = False
    order_id: str = ""


def _intent_from_event(event: dict) -> dict:
    data = event.get("data") or {}
    obj = data.get("object") if isinstance(data, dict) else None
    return obj if isinstance(obj, dict) else {}


def _find_order_for_intent(intent: dict):
    intent_id = str(intent.get("id") or "").strip()
    metadata = intent.get("metadata") or {}

    qs = Order.objects.select_for_update()
    order = qs.filter(payment_intent_id=intent_id).first() if intent_id else None
    if order is None and metadata.get("order_id"):
        try:
            order = qs.filter(id=uuid.UUID(str(metadata["order_id"]))).first()
        except ValueError:
            order = None
    return order


def _apply_succeeded(*, intent: dict, order: Order) -> tuple[str, str]:
    if order.status != lifecycle.PENDING:
        logger.info(
            "Payment already applied",
            extra={"order_id": str(order.id), "order_status": order.status},
        )
        return PaymentEvent.OUTCOME_IGNORED, f"Order already '{order.status}'"

    received = intent.get("amount_received", intent.get("amount"))
    currency = str(intent.get("currency") or "").lower()
    expected_minor = to_minor_units(order.grand_total)

    try:
        received_minor = int(received)
    except (TypeError, ValueError):
        received_minor = None

    if received_minor != expected_minor or (currency and currency != order.currency.lower()):
        logger.error(
            "Payment amount mismatch",
            extra={
                "order_id": str(order.id),
                "paid": received,
                "expected": expected_minor,
                "currency": currency,
            },
        )
        return PaymentEvent.OUTCOME_FAILED, "Amount mismatch"

    transition_order(
        order_id=order.id,
        to_status=lifecycle.PAID,
        expected_status=lifecycle.PENDING,
        source=lifecycle.PAYMENT,
        note=f"Stripe {intent.get('id')}",
    )
    return PaymentEvent.OUTCOME_CONFIRMED, "Order paid"


@transaction.atomic
def process_payment_event(event: dict) -> PaymentEventResult:
    event_id = str(event.get("id") or "").strip()
    event_type = str(event.get("type") or "").strip()
    intent = _intent_from_event(event)
    intent_id = str(intent.get("id") or "")

    try:
        with transaction.atomic():
            record = PaymentEvent.objects.create(
                event_id=event_id,
                event_type=event_type,
                payment_intent_id=intent_id,
                outcome=PaymentEvent.OUTCOME_IGNORED,
                payload=event,
            )
    except IntegrityError:
        logger.info("Duplicate webhook ignored", extra={"event_id": event_id})
        return PaymentEventResult(
            event_id=event_id,
            outcome=PaymentEvent.OUTCOME_IGNORED,
            detail="Duplicate event",
            duplicate=True,
        )

    order = _find_order_for_intent(intent) if intent_id else None

    if event_type not in (EVENT_SUCCEEDED, EVENT_FAILED):
        outcome, detail = PaymentEvent.OUTCOME_IGNORED, "Unhandled event type"
    elif order is None:
        logger.warning("Unknown payment intent", extra={"payment_intent_id": intent_id})
        outcome, detail = PaymentEvent.OUTCOME_IGNORED, "Unknown payment intent"
    elif event_type == EVENT_SUCCEEDED:
        outcome, detail = _apply_succeeded(intent=intent, order=order)
    else:
        error = intent.get("last_payment_error") or {}
        detail = str(error.get("message") or "Payment failed")[:255]
        logger.warning(
            "Payment failed",
            extra={"order_id": str(order.id), "payment_intent_id": intent_id, "reason": detail},
        )
        outcome = PaymentEvent.OUTCOME_FAILED

    amount = intent.get("amount_received", intent.get("amount"))
    record.order = order
    record.outcome = outcome
    record.detail = detail
    record.currency = str(intent.get("currency") or settings.SHOP_CURRENCY)
    record.amount = from_minor_units(amount) if isinstance(amount, int) else None
    record.save(update_fields=["order", "outcome", "detail", "currency", "amount"])

    logger.info(
        "Payment event processed",
        extra={"event_id": event_id, "event_type": event_type, "outcome": outcome},
    )
    return PaymentEventResult(
        event_id=event_id,
        outcome=outcome,
        detail=detail,
        order_id=str(order.id) if order else "",
    )
