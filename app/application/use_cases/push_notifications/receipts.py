"""Reconcile push receipts with the stored notification records."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import PushOutcome
from app.domain.exceptions import PushDispatchError, ReceiptReconciliationError
from app.infrastructure.push import ExpoPushClient, chunk_receipt_ids
from app.infrastructure.repositories import PushNotificationRepository, UserRepository

from .tickets import TicketTracker

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationSummary:
    """Counters describing one receipt check."""

    delivered: int = 0
    failed: int = 0
    unregistered: int = 0
    pending: int = 0


class ReceiptReconciler:
    """Fetch receipts once for every tracked ticket and finalize the records.

    Receipts that are not available yet are left in the tracker and are not
    checked again. Errors are logged and never raised, since no caller is
    waiting for the outcome.
    """

    def __init__(
        self,
        *,
        gateway: ExpoPushClient,
        session_factory: Callable[[], Session],
    ) -> None:
        self.gateway = gateway
        self.session_factory = session_factory

    def __call__(self, tracker: TicketTracker) -> ReconciliationSummary:
        return self.reconcile(tracker)

    def reconcile(self, tracker: TicketTracker) -> ReconciliationSummary:
        summary = ReconciliationSummary()
        ticket_ids = tracker.ticket_ids()
        if not ticket_ids:
            return summary

        with self.session_factory() as session:
            records = PushNotificationRepository(session)
            users = UserRepository(session)
            for chunk in chunk_receipt_ids(ticket_ids):
                try:
                    receipts = self.gateway.fetch_receipts(chunk)
                except ReceiptReconciliationError:
                    logger.exception("Error checking receipts for %s push tickets", len(chunk))
                    continue
                for ticket_id, receipt in receipts.items():
                    self._process_receipt(ticket_id, receipt, tracker, records, users, summary)

        summary.pending = len(tracker)
        logger.info(
            "Receipt check finished: %s delivered, %s failed (%s unregistered), %s pending",
            summary.delivered,
            summary.failed,
            summary.unregistered,
            summary.pending,
        )
        return summary

    @staticmethod
    def _process_receipt(
        ticket_id: str,
        receipt: PushOutcome,
        tracker: TicketTracker,
        records: PushNotificationRepository,
        users: UserRepository,
        summary: ReconciliationSummary,
    ) -> None:
        record_id = tracker.get(ticket_id)
        logger.debug("Processing receipt for ticket %s, notification %s", ticket_id, record_id)
        if record_id is None:
            return

        try:
            if receipt.is_ok:
                if records.mark_delivered(record_id):
                    summary.delivered += 1
            else:
                if receipt.is_device_not_registered:
                    record = records.get(record_id)
                    if record is not None:
                        users.clear_user_token(record.user_id)
                        summary.unregistered += 1
                if records.mark_failed(record_id, receipt.details or receipt.to_dict()):
                    summary.failed += 1
                logger.warning(
                    "Push receipt error for notification %s: %s",
                    record_id,
                    receipt.to_dict(),
                )
        except (PushDispatchError, SQLAlchemyError):
            logger.exception("Could not apply receipt for ticket %s", ticket_id)
            return

        tracker.pop(ticket_id)


__all__ = ["ReceiptReconciler", "ReconciliationSummary"]
