"""FastAPI dependency utilities."""

from __future__ import annotations

import secrets
from functools import lru_cache

from fastapi import Header, HTTPException, status

from app.application.use_cases.push_notifications import ReceiptReconciler
from app.config import get_settings
from app.domain.exceptions import AuthError
from app.infrastructure.database import SessionLocal
from app.infrastructure.push import ExpoPushClient, ReceiptCheckScheduler

BEARER_PREFIX = "Bearer "


def verify_shared_secret(authorization: str | None, expected: str) -> None:
    """Raise :class:`AuthError` unless ``authorization`` carries ``expected``."""

    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthError("Missing bearer credential")
    credential = authorization[len(BEARER_PREFIX) :].strip()
    if not secrets.compare_digest(credential.encode(), expected.encode()):
        raise AuthError("Invalid bearer credential")


def require_shared_secret(authorization: str | None = Header(default=None)) -> None:
    """Reject callers that do not present the configured shared secret."""

    try:
        verify_shared_secret(authorization, get_settings().push_shared_secret)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        ) from exc


@lru_cache
def get_push_gateway() -> ExpoPushClient:
    """Return the shared Expo push client."""

    return ExpoPushClient.from_settings(get_settings())


@lru_cache
def get_receipt_scheduler() -> ReceiptCheckScheduler:
    """Return the scheduler that runs delayed receipt checks."""

    reconciler = ReceiptReconciler(gateway=get_push_gateway(), session_factory=SessionLocal)
    return ReceiptCheckScheduler(
        reconciler,
        delay=get_settings().receipt_check_delay_seconds,
    )


__all__ = [
    "get_push_gateway",
    "get_receipt_scheduler",
    "require_shared_secret",
    "verify_shared_secret",
]
