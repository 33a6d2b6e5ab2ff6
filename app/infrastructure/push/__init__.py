"""Expo push gateway integration."""

from .batching import (
    PUSH_NOTIFICATION_CHUNK_LIMIT,
    PUSH_RECEIPT_CHUNK_LIMIT,
    chunk_messages,
    chunk_receipt_ids,
)
from .client import ExpoPushClient
from .scheduler import ReceiptCheckScheduler
from .tokens import ensure_push_token, is_push_token

__all__ = [
    "PUSH_NOTIFICATION_CHUNK_LIMIT",
    "PUSH_RECEIPT_CHUNK_LIMIT",
    "ExpoPushClient",
    "ReceiptCheckScheduler",
    "chunk_messages",
    "chunk_receipt_ids",
    "ensure_push_token",
    "is_push_token",
]
