# production/services/queue.py

"""
PRODUCTION QUEUE SERVICE

- create_queue_for_order(): one entry per order line, created when the order
  enters processing (no-op if the order already has entries)
- cancel_open_items(): order cancelled -> unfinished entries cancelled
- update_queue_item(): admin edits (assignments, priority, notes, sub-status)

Queue entries are a read model for the workshop. Nothing here changes an
order's status.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from production.models import Material, Printer, ProductionQueueItem
from production.services import production_lifecycle as lifecycle
from users.models.user import STAFF_ROLES

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "priority",
    "estimated_time_minutes",
    "actual_time_minutes",
    "notes",
)


def create_queue_for_order(order) -> list:
    """Create queue entries for every line of `order`. Caller holds the order lock."""
    if ProductionQueueItem.objects.filter(order=order).exists():
        logger.info(
            "Production queue already exists for order",
            extra={"order_id": str(order.id)},
        )
        return []

    created = [
        ProductionQueueItem.objects.create(order=order, order_item_index=idx)
        for idx, _ in enumerate(order.items or [])
    ]

    logger.info(
        "Production queue created",
        extra={"order_id": str(order.id), "count": len(created)},
    )
    return created


def cancel_open_items(order) -> int:
    count = ProductionQueueItem.objects.filter(
        order=order,
        status__in=lifecycle.OPEN_STATES,
    ).update(status=lifecycle.CANCELLED, updated_at=timezone.now())

    if count:
        logger.info(
            "Open production items cancelled",
            extra={"order_id": str(order.id), "count": count},
        )
    return count


def _resolve_fk(model, value, *, field: str, **filters):
    if value in (None, ""):
        return None
    obj = model.objects.filter(pk=value, **filters).first()
    if obj is None:
        raise ValidationError(f"Unknown {field}: {value}")
    return obj


@transaction.atomic
def update_queue_item(*, item_id, data: dict, actor=None) -> ProductionQueueItem:
    """
    Apply an admin edit.

    data keys (all optional): status, printer_id, material_id, assigned_to_id,
    priority, estimated_time_minutes, actual_time_minutes, notes.
    A None value for an assignment clears it.
    """
    item = ProductionQueueItem.objects.select_for_update().filter(id=item_id).first()
    if item is None:
        raise NotFoundError("Production item not found")

    touched = []

    if "printer_id" in data:
        item.printer = _resolve_fk(Printer, data["printer_id"], field="printer")
        touched.append("printer")

    if "material_id" in data:
        item.material = _resolve_fk(Material, data["material_id"], field="material", is_active=True)
        touched.append("material")

    if "assigned_to_id" in data:
        item.assigned_to = _resolve_fk(
            get_user_model(),
            data["assigned_to_id"],
            field="assignee",
            role__in=STAFF_ROLES,
            is_active=True,
        )
        touched.append("assigned_to")

    for field in EDITABLE_FIELDS:
        if field in data:
            setattr(item, field, data[field])
            touched.append(field)

    new_status = data.get("status")
    from_status = item.status
    if new_status and new_status != item.status:
        lifecycle.validate_transition(from_status=item.status, to_status=new_status)
        item.status = new_status
        touched.append("status")

        now = timezone.now()
        if new_status == lifecycle.PRINTING and not item.started_at:
            item.started_at = now
            touched.append("started_at")
        if new_status == lifecycle.COMPLETED and not item.completed_at:
            item.completed_at = now
            touched.append("completed_at")

    if touched:
        item.save(update_fields=list(dict.fromkeys(touched + ["updated_at"])))

    logger.info(
        "Production item updated",
        extra={
            "item_id": str(item.id),
            "order_id": str(item.order_id),
            "from_status": from_status,
            "to_status": item.status,
            "actor_id": str(getattr(actor, "id", "") or ""),
        },
    )
    return item


def queue_queryset(*, include_closed: bool = False, status: str | None = None):
    qs = ProductionQueueItem.objects.select_related(
        "order", "printer", "material", "assigned_to"
    ).order_by("-priority", "created_at", "order_item_index")

    if status:
        return qs.filter(status=status)
    if not include_closed:
        qs = qs.exclude(status__in=lifecycle.TERMINAL_STATES)
    return qs
