"""Domain entities exposed by the application."""

from .notification import ALLOWED_SOURCE_STATUSES, NotificationRecord, NotificationStatus
from .push import (
    DEVICE_NOT_REGISTERED,
    PUSH_STATUS_ERROR,
    PUSH_STATUS_OK,
    PushMessage,
    PushOutcome,
)
from .user import PushRecipient

__all__ = [
    "ALLOWED_SOURCE_STATUSES",
    "NotificationRecord",
    "NotificationStatus",
    "DEVICE_NOT_REGISTERED",
    "PUSH_STATUS_ERROR",
    "PUSH_STATUS_OK",
    "PushMessage",
    "PushOutcome",
    "PushRecipient",
]
