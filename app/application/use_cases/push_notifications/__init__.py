"""Use cases for dispatching push notifications."""

from .receipts import ReceiptReconciler, ReconciliationSummary
from .send_push_notifications import DispatchResult, send_push_notifications
from .tickets import TicketTracker
from .validators import MISSING_FIELDS_MESSAGE, SendPushRequest, build_send_request

__all__ = [
    "DispatchResult",
    "MISSING_FIELDS_MESSAGE",
    "ReceiptReconciler",
    "ReconciliationSummary",
    "SendPushRequest",
    "TicketTracker",
    "build_send_request",
    "send_push_notifications",
]
