"""Validation of Expo device push tokens."""

from __future__ import annotations

import re
from typing import Final

from app.domain.exceptions import InvalidTokenError

_UUID_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}$",
    re.IGNORECASE,
)
_TOKEN_PREFIXES: Final[tuple[str, ...]] = ("ExponentPushToken[", "ExpoPushToken[")


def is_push_token(token: object) -> bool:
    """Return ``True`` when ``token`` looks like a push token Expo accepts."""

    if not isinstance(token, str) or not token:
        return False
    if token.startswith(_TOKEN_PREFIXES) and token.endswith("]"):
        return True
    return bool(_UUID_TOKEN_PATTERN.match(token))


def ensure_push_token(token: object, *, user_id: int | None = None) -> str:
    """Return ``token`` or raise :class:`InvalidTokenError`."""

    if not is_push_token(token):
        owner = f" for user {user_id}" if user_id is not None else ""
        raise InvalidTokenError(f"Invalid push token{owner}: {token!r}")
    return token  # type: ignore[return-value]


__all__ = ["ensure_push_token", "is_push_token"]
