"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed status transitions for Order entities,
and who may trigger each of them.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth

Preconditions that need order data (tracking number, note, refundability)
live in orders.services.order_transitions.
"""

from core.exceptions import InvalidTransitionError
from orders.models import Order, OrderStatusEvent

PENDING = Order.STATUS_PENDING
PAID = Order.STATUS_PAID
PROCESSING = Order.STATUS_PROCESSING
AWAITING_INFO = Order.STATUS_AWAITING_INFO
SHIPPED = Order.STATUS_SHIPPED
DELIVERED = Order.STATUS_DELIVERED
CANCELLED = Order.STATUS_CANCELLED
REFUND_REQUESTED = Order.STATUS_REFUND_REQUESTED
REFUNDED = Order.STATUS_REFUNDED

ADMIN = OrderStatusEvent.SOURCE_ADMIN
PAYMENT = OrderStatusEvent.SOURCE_PAYMENT
CUSTOMER = OrderStatusEvent.SOURCE_CUSTOMER
DELIVERY = OrderStatusEvent.SOURCE_DELIVERY
SYSTEM = OrderStatusEvent.SOURCE_SYSTEM

SOURCES = {ADMIN, PAYMENT, CUSTOMER, DELIVERY, SYSTEM}

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    CANCELLED,
    REFUNDED,
}

ALLOWED_TRANSITIONS = {
    PENDING: {PAID},
    PAID: {PROCESSING, CANCELLED},
    PROCESSING: {AWAITING_INFO, SHIPPED, CANCELLED},
    AWAITING_INFO: {PROCESSING},
    SHIPPED: {DELIVERED},
    DELIVERED: {REFUND_REQUESTED},
    REFUND_REQUESTED: {REFUNDED},
}

# (from, to) -> sources allowed to trigger it; anything unlisted is admin-only
TRANSITION_SOURCES = {
    (PENDING, PAID): {PAYMENT},
    (SHIPPED, DELIVERED): {ADMIN, DELIVERY},
    (DELIVERED, REFUND_REQUESTED): {ADMIN, CUSTOMER},
}

DEFAULT_SOURCES = {ADMIN, SYSTEM}

# First arrival at these states sends exactly one customer email
NOTIFY_ON_FIRST_ARRIVAL = {
    PAID: "confirmation",
    SHIPPED: "shipped",
    DELIVERED: "delivered",
}

# Every arrival at these states sends an email
NOTIFY_ON_EVERY_ARRIVAL = {
    AWAITING_INFO: "awaiting_info",
}

# Timestamp stamped on first arrival
TIMESTAMP_FIELDS = {
    PAID: "paid_at",
    PROCESSING: "processing_at",
    SHIPPED: "shipped_at",
    DELIVERED: "delivered_at",
    CANCELLED: "cancelled_at",
    REFUNDED: "refunded_at",
}


# ============================================================
# DOMAIN RULES
# ============================================================


def allowed_sources(*, from_status: str, to_status: str) -> set:
    return TRANSITION_SOURCES.get((from_status, to_status), DEFAULT_SOURCES)


def can_transition(*, from_status: str, to_status: str, source: str = ADMIN) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    if to_status not in ALLOWED_TRANSITIONS.get(from_status, set()):
        return False

    return source in allowed_sources(from_status=from_status, to_status=to_status)


def next_statuses(*, from_status: str, source: str = ADMIN) -> list:
    """Targets reachable from from_status for the given source (for admin UIs)."""
    return sorted(
        to
        for to in ALLOWED_TRANSITIONS.get(from_status, set())
        if can_transition(from_status=from_status, to_status=to, source=source)
    )


def validate_transition(*, from_status: str, to_status: str, source: str = ADMIN):
    if source not in SOURCES:
        raise InvalidTransitionError(
            from_status=from_status,
            to_status=to_status,
            reason=f"unknown source '{source}'",
        )

    if from_status in TERMINAL_STATES:
        raise InvalidTransitionError(
            from_status=from_status,
            to_status=to_status,
            reason=f"'{from_status}' is terminal",
        )

    if to_status not in ALLOWED_TRANSITIONS.get(from_status, set()):
        raise InvalidTransitionError(from_status=from_status, to_status=to_status)

    sources = allowed_sources(from_status=from_status, to_status=to_status)
    if source not in sources:
        raise InvalidTransitionError(
            from_status=from_status,
            to_status=to_status,
            reason=f"not allowed for source '{source}'",
        )
