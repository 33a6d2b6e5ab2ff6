"""Validation helpers for push notification requests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from app.domain.exceptions import ValidationError

MISSING_FIELDS_MESSAGE = "Missing required fields"


@dataclass(frozen=True)
class SendPushRequest:
    """Validated request to notify a set of users."""

    user_ids: list[int]
    sender_user_id: int
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    tournament_id: int | None = None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def ensure_user_ids(user_ids: Any) -> list[int]:
    """Return ``user_ids`` without duplicates, preserving order."""

    if not isinstance(user_ids, (list, tuple)) or not user_ids:
        raise ValidationError(MISSING_FIELDS_MESSAGE)
    if not all(_is_int(user_id) for user_id in user_ids):
        raise ValidationError("user_ids must contain integers only")
    return list(dict.fromkeys(user_ids))


def _ensure_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(MISSING_FIELDS_MESSAGE)
    return value


def build_send_request(
    *,
    user_ids: Any,
    sender_user_id: Any,
    title: Any,
    body: Any,
    data: Any = None,
    tournament_id: Any = None,
) -> SendPushRequest:
    """Validate raw request values or raise :class:`ValidationError`."""

    ids = ensure_user_ids(user_ids)
    if not _is_int(sender_user_id) or not sender_user_id:
        raise ValidationError(MISSING_FIELDS_MESSAGE)
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValidationError("data must be a JSON object")
    if tournament_id is not None and not _is_int(tournament_id):
        raise ValidationError("tournament_id must be an integer")

    return SendPushRequest(
        user_ids=ids,
        sender_user_id=sender_user_id,
        title=_ensure_text(title),
        body=_ensure_text(body),
        data=dict(data),
        tournament_id=tournament_id,
    )


__all__ = [
    "MISSING_FIELDS_MESSAGE",
    "SendPushRequest",
    "build_send_request",
    "ensure_user_ids",
]
