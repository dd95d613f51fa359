# support/services/messages.py

"""
CUSTOMER MESSAGES

- create_contact_message(): public contact form (optionally tied to an order)
- update_message(): back-office triage (status, priority, assignee, tags)
- reply_to_message(): staff reply stored in the thread and emailed after commit
- mark_read(): first staff read stamps read_at

Reply emails are best effort: a mail failure is logged, the reply stays saved.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from orders.models import Order
from support.models import Message
from users.models.user import STAFF_ROLES

logger = logging.getLogger(__name__)

TRIAGE_FIELDS = ("status", "priority", "tags")


def _find_order(*, order_id=None, order_no: str = "", email: str = ""):
    """Orders are only linked when the sender's email matches the order."""
    qs = Order.objects.all()
    if order_id:
        qs = qs.filter(id=order_id)
    elif order_no:
        qs = qs.filter(order_no__iexact=order_no.strip())
    else:
        return None

    order = qs.first()
    if order is None or order.customer_email.strip().lower() != email.strip().lower():
        return None
    return order


@transaction.atomic
def create_contact_message(
    *,
    sender_email: str,
    content: str,
    sender_name: str = "",
    subject: str = "",
    order_id=None,
    order_no: str = "",
    user=None,
) -> Message:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message content is required")

    sender_email = sender_email.strip()
    order = _find_order(order_id=order_id, order_no=order_no, email=sender_email)
    if (order_id or order_no) and order is None:
        logger.warning(
            "Contact message order reference not linked",
            extra={"order_ref": str(order_id or order_no)},
        )

    message = Message.objects.create(
        sender_email=sender_email,
        sender_name=(sender_name or "").strip(),
        subject=(subject or "").strip(),
        content=content,
        order=order,
        user=user if getattr(user, "is_authenticated", False) else None,
        is_from_customer=True,
    )

    logger.info(
        "Contact message received",
        extra={"message_id": str(message.id), "order_id": str(order.id) if order else ""},
    )
    return message


def _get_root(message_id) -> Message:
    message = Message.objects.select_for_update().filter(id=message_id).first()
    if message is None:
        raise NotFoundError("Message not found")
    if message.thread_id:
        message = Message.objects.select_for_update().get(id=message.thread_id)
    return message


@transaction.atomic
def update_message(*, message_id, data: dict, actor=None) -> Message:
    message = _get_root(message_id)
    touched = []

    for field in TRIAGE_FIELDS:
        if field in data:
            setattr(message, field, data[field])
            touched.append(field)

    if "assigned_to_id" in data:
        assignee = None
        if data["assigned_to_id"]:
            assignee = (
                get_user_model()
                .objects.filter(id=data["assigned_to_id"], role__in=STAFF_ROLES, is_active=True)
                .first()
            )
            if assignee is None:
                raise ValidationError(f"Unknown assignee: {data['assigned_to_id']}")
        message.assigned_to = assignee
        touched.append("assigned_to")

    if touched:
        message.save(update_fields=touched + ["updated_at"])

    logger.info(
        "Message updated",
        extra={
            "message_id": str(message.id),
            "fields": touched,
            "actor_id": str(getattr(actor, "id", "") or ""),
        },
    )
    return message


def mark_read(message: Message) -> Message:
    if message.read_at is None:
        message.read_at = timezone.now()
        message.save(update_fields=["read_at"])
    return message


def send_reply_email(*, recipient: str, subject: str, content: str, message_id: str) -> bool:
    try:
        send_mail(
            subject,
            content,
            settings.DEFAULT_FROM_EMAIL,
            [recipient],
            fail_silently=False,
        )
    except Exception:
        logger.exception("Reply email failed", extra={"message_id": message_id})
        return False

    logger.info("Reply email sent", extra={"message_id": message_id})
    return True


@transaction.atomic
def reply_to_message(*, message_id, content: str, subject: str = "", actor=None) -> Message:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Reply content is required")

    root = _get_root(message_id)
    if root.status == Message.STATUS_SPAM:
        raise ValidationError("Cannot reply to a message marked as spam")

    subject = (subject or "").strip() or f"Re: {root.subject or 'Twoja wiadomość'}"

    reply = Message.objects.create(
        thread=root,
        order=root.order,
        user=actor if getattr(actor, "is_authenticated", False) else None,
        sender_name="Layered",
        sender_email=settings.DEFAULT_FROM_EMAIL,
        subject=subject,
        content=content,
        is_from_customer=False,
        status=Message.STATUS_CLOSED,
    )

    if root.status == Message.STATUS_NEW:
        root.status = Message.STATUS_IN_PROGRESS
    if root.read_at is None:
        root.read_at = timezone.now()
    root.save(update_fields=["status", "read_at", "updated_at"])

    recipient = root.sender_email
    reply_id = str(reply.id)
    transaction.on_commit(
        lambda: send_reply_email(
            recipient=recipient, subject=subject, content=content, message_id=reply_id
        )
    )

    logger.info(
        "Message reply created",
        extra={"message_id": str(root.id), "reply_id": reply_id},
    )
    return reply
