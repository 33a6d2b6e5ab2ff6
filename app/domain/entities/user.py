"""Domain entity describing a push notification recipient."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PushRecipient:
    """User that can receive push notifications."""

    user_id: int
    push_token: str | None
    unread_count: int = 0


__all__ = ["PushRecipient"]
