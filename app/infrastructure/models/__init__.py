"""ORM models used by the application infrastructure."""

from .user import UserModel
from .push_notification import PushNotificationModel

__all__ = [
    "UserModel",
    "PushNotificationModel",
]
