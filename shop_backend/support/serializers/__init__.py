from .message import (
    ContactMessageSerializer,
    MessageReplySerializer,
    MessageSerializer,
    MessageThreadSerializer,
    MessageUpdateSerializer,
)

__all__ = [
    "ContactMessageSerializer",
    "MessageReplySerializer",
    "MessageSerializer",
    "MessageThreadSerializer",
    "MessageUpdateSerializer",
]
