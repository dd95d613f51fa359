"""
PRODUCTION ITEM LIFECYCLE RULES

pending -> preparing -> printing -> post_processing -> ready -> completed
cancelled is reachable from every non-terminal state.

Pure rules: no database writes, no side effects. Nothing here touches the
parent order's status.
"""

from core.exceptions import InvalidTransitionError
from production.models import ProductionQueueItem

PENDING = ProductionQueueItem.STATUS_PENDING
PREPARING = ProductionQueueItem.STATUS_PREPARING
PRINTING = ProductionQueueItem.STATUS_PRINTING
POST_PROCESSING = ProductionQueueItem.STATUS_POST_PROCESSING
READY = ProductionQueueItem.STATUS_READY
COMPLETED = ProductionQueueItem.STATUS_COMPLETED
CANCELLED = ProductionQueueItem.STATUS_CANCELLED

PIPELINE = [PENDING, PREPARING, PRINTING, POST_PROCESSING, READY, COMPLETED]

TERMINAL_STATES = {COMPLETED, CANCELLED}

ALLOWED_TRANSITIONS = {
    status: {PIPELINE[idx + 1], CANCELLED}
    for idx, status in enumerate(PIPELINE[:-1])
}

OPEN_STATES = set(PIPELINE) - TERMINAL_STATES


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def next_status(status: str) -> str | None:
    """Next pipeline step (what the admin "advance" button does)."""
    if status in TERMINAL_STATES or status not in PIPELINE:
        return None
    return PIPELINE[PIPELINE.index(status) + 1]


def validate_transition(*, from_status: str, to_status: str):
    if not can_transition(from_status=from_status, to_status=to_status):
        raise InvalidTransitionError(from_status=from_status, to_status=to_status)
