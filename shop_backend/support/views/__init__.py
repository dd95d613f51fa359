from .messages import (
    AdminMessageDetailView,
    AdminMessageListView,
    AdminMessageReplyView,
    ContactMessageView,
)

__all__ = [
    "AdminMessageDetailView",
    "AdminMessageListView",
    "AdminMessageReplyView",
    "ContactMessageView",
]
