"""Aggregate application use cases."""

from .push_notifications import build_send_request, send_push_notifications

__all__ = [
    "build_send_request",
    "send_push_notifications",
]
