# orders/services/notifications.py

"""
ORDER EMAILS (BEST EFFORT)

Collaborator contract: (kind, order snapshot, recipient).

- Emails are scheduled with transaction.on_commit so a rolled-back transition
  never sends anything
- With NOTIFICATIONS_ASYNC the send runs on a small thread pool
- Failures are logged and swallowed; they never affect order state
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from core.money import money_str

logger = logging.getLogger(__name__)

KIND_CONFIRMATION = "confirmation"
KIND_SHIPPED = "shipped"
KIND_DELIVERED = "delivered"
KIND_AWAITING_INFO = "awaiting_info"

SUBJECTS = {
    KIND_CONFIRMATION: "Potwierdzenie zamówienia {order_no}",
    KIND_SHIPPED: "Zamówienie {order_no} zostało wysłane",
    KIND_DELIVERED: "Zamówienie {order_no} zostało dostarczone",
    KIND_AWAITING_INFO: "Potrzebujemy informacji do zamówienia {order_no}",
}

_executor = None


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=int(getattr(settings, "NOTIFICATIONS_MAX_WORKERS", 2) or 2),
            thread_name_prefix="order-mail",
        )
    return _executor


def order_snapshot(order) -> dict:
    """Plain-data copy of what an email needs (safe to hand to another thread)."""
    return {
        "id": str(order.id),
        "order_no": order.order_no,
        "status": order.status,
        "customer_name": order.customer_name,
        "items": [
            {
                "name": i.get("name", ""),
                "quantity": i.get("quantity", 0),
                "price_total": i.get("price_total", "0.00"),
                "customizations": i.get("customization_summary", []),
            }
            for i in (order.items or [])
        ],
        "total": money_str(order.total),
        "delivery_method": order.delivery_method,
        "delivery_cost": money_str(order.delivery_cost),
        "grand_total": money_str(order.grand_total),
        "tracking_number": order.tracking_number,
        "status_note": order.status_note,
    }


def render_email(kind: str, snapshot: dict) -> tuple[str, str]:
    subject = SUBJECTS[kind].format(order_no=snapshot["order_no"])

    greeting = f"Dzień dobry {snapshot.get('customer_name') or ''},".replace(" ,", ",")
    lines = [greeting, ""]

    if kind == KIND_CONFIRMATION:
        lines.append(f"dziękujemy za zamówienie {snapshot['order_no']}. Płatność została przyjęta.")
        lines.append("")
        for item in snapshot["items"]:
            lines.append(f"- {item['name']} x{item['quantity']}: {item['price_total']} zł")
            for summary in item.get("customizations") or []:
                lines.append(f"    {summary}")
        lines.append("")
        lines.append(f"Produkty: {snapshot['total']} zł")
        lines.append(f"Dostawa: {snapshot['delivery_cost']} zł")
        lines.append(f"Razem: {snapshot['grand_total']} zł")
    elif kind == KIND_SHIPPED:
        lines.append(f"Twoje zamówienie {snapshot['order_no']} zostało wysłane.")
        if snapshot.get("tracking_number"):
            lines.append(f"Numer przesyłki: {snapshot['tracking_number']}")
    elif kind == KIND_DELIVERED:
        lines.append(f"Twoje zamówienie {snapshot['order_no']} zostało dostarczone.")
        lines.append("Dziękujemy za zakupy w Layered!")
    elif kind == KIND_AWAITING_INFO:
        lines.append(
            f"Realizacja zamówienia {snapshot['order_no']} została wstrzymana, "
            "ponieważ potrzebujemy dodatkowych informacji:"
        )
        lines.append("")
        lines.append(snapshot.get("status_note") or "")
        lines.append("")
        lines.append("Prosimy o odpowiedź na tę wiadomość.")

    lines.extend(["", "Zespół Layered"])
    return subject, "\n".join(lines)


def send_order_email(*, kind: str, snapshot: dict, recipient: str) -> bool:
    if not recipient:
        logger.warning(
            "Order email skipped: no recipient",
            extra={"kind": kind, "order_id": snapshot.get("id")},
        )
        return False

    try:
        subject, body = render_email(kind, snapshot)
        send_mail(
            subject,
            body,
            settings.DEFAULT_FROM_EMAIL,
            [recipient],
            fail_silently=False,
        )
    except Exception:
        logger.exception(
            "Order email failed",
            extra={"kind": kind, "order_id": snapshot.get("id")},
        )
        return False

    logger.info("Order email sent", extra={"kind": kind, "order_id": snapshot.get("id")})
    return True


def dispatch_order_email(*, kind: str, snapshot: dict, recipient: str) -> None:
    if getattr(settings, "NOTIFICATIONS_ASYNC", False):
        _get_executor().submit(send_order_email, kind=kind, snapshot=snapshot, recipient=recipient)
        return
    send_order_email(kind=kind, snapshot=snapshot, recipient=recipient)


def schedule_order_email(*, kind: str, order) -> None:
    """Queue an email for after the current transaction commits."""
    snapshot = order_snapshot(order)
    recipient = order.customer_email
    transaction.on_commit(
        lambda: dispatch_order_email(kind=kind, snapshot=snapshot, recipient=recipient)
    )
