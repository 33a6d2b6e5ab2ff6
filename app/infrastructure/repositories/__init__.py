"""Repository implementations for infrastructure layer."""

from .push_notification_repository import PushNotificationRepository, serialize_diagnostic
from .user_repository import UserRepository

__all__ = [
    "PushNotificationRepository",
    "UserRepository",
    "serialize_diagnostic",
]
