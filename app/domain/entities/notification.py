"""Domain entity representing a persisted push notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any


class NotificationStatus(IntEnum):
    """Delivery state of a push notification record."""

    CREATED = 0
    SUBMITTED = 1
    DELIVERED = 2
    FAILED = 3

    @property
    def is_terminal(self) -> bool:
        return self in (NotificationStatus.DELIVERED, NotificationStatus.FAILED)


# Source states each transition may start from.
ALLOWED_SOURCE_STATUSES: dict[NotificationStatus, tuple[NotificationStatus, ...]] = {
    NotificationStatus.SUBMITTED: (NotificationStatus.CREATED,),
    NotificationStatus.DELIVERED: (NotificationStatus.SUBMITTED,),
    NotificationStatus.FAILED: (NotificationStatus.CREATED, NotificationStatus.SUBMITTED),
}


@dataclass
class NotificationRecord:
    """One user's copy of a push notification and its delivery outcome."""

    id: int | None
    user_id: int
    sender_user_id: int
    token: str | None
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    status: NotificationStatus = NotificationStatus.CREATED
    ticket_id: str | None = None
    error_message: str | None = None
    tournament_id: int | None = None
    created_at: datetime | None = None
    seen_at: datetime | None = None


__all__ = ["ALLOWED_SOURCE_STATUSES", "NotificationRecord", "NotificationStatus"]
