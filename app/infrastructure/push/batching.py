"""Split outbound push work into gateway-sized chunks."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TypeVar

# Limits enforced by the Expo push API.
PUSH_NOTIFICATION_CHUNK_LIMIT = 100
PUSH_RECEIPT_CHUNK_LIMIT = 300

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` entries."""

    if size < 1:
        raise ValueError("Chunk size must be a positive integer")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def chunk_messages(
    messages: Sequence[T], size: int = PUSH_NOTIFICATION_CHUNK_LIMIT
) -> list[list[T]]:
    """Group messages for ``/push/send``.

    The gateway answers with one ticket per message in the same order, so the
    position of a message inside its chunk identifies its ticket.
    """

    return list(chunked(messages, size))


def chunk_receipt_ids(
    ticket_ids: Sequence[str], size: int = PUSH_RECEIPT_CHUNK_LIMIT
) -> list[list[str]]:
    """Group ticket identifiers for ``/push/getReceipts``."""

    return list(chunked(ticket_ids, size))


__all__ = [
    "PUSH_NOTIFICATION_CHUNK_LIMIT",
    "PUSH_RECEIPT_CHUNK_LIMIT",
    "chunk_messages",
    "chunk_receipt_ids",
    "chunked",
]
