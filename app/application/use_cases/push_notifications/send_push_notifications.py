"""Use case that records push notifications and submits them to the gateway."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from app.domain.entities import NotificationRecord, PushMessage, PushOutcome, PushRecipient
from app.domain.exceptions import GatewayError, InvalidTokenError, PersistenceError
from app.infrastructure.push import (
    ExpoPushClient,
    ReceiptCheckScheduler,
    chunk_messages,
    ensure_push_token,
)
from app.infrastructure.repositories import PushNotificationRepository, UserRepository

from .tickets import TicketTracker
from .validators import SendPushRequest

logger = logging.getLogger(__name__)

RECORD_ID_DATA_KEY = "m"
DUPLICATE_TICKET = "DuplicateTicket"


@dataclass
class DispatchResult:
    """Outcome of one dispatch cycle."""

    recipients: int = 0
    created: int = 0
    skipped: int = 0
    submitted: int = 0
    failed: int = 0
    tickets: TicketTracker = field(default_factory=TicketTracker)


def _build_message(
    request: SendPushRequest,
    recipient: PushRecipient,
    record: NotificationRecord,
    token: str,
) -> PushMessage:
    return PushMessage(
        record_id=record.id,
        user_id=recipient.user_id,
        to=token,
        title=request.title,
        body=request.body,
        data={**request.data, RECORD_ID_DATA_KEY: record.id},
        badge=recipient.unread_count + 1,
    )


def _prepare_messages(
    request: SendPushRequest,
    recipients: list[PushRecipient],
    records: PushNotificationRepository,
    result: DispatchResult,
) -> list[PushMessage]:
    """Create one record per recipient and the messages for valid tokens."""

    messages: list[PushMessage] = []
    for recipient in recipients:
        try:
            record = records.create(
                NotificationRecord(
                    id=None,
                    user_id=recipient.user_id,
                    sender_user_id=request.sender_user_id,
                    token=recipient.push_token,
                    title=request.title,
                    body=request.body,
                    data=request.data,
                    tournament_id=request.tournament_id,
                )
            )
        except PersistenceError:
            logger.exception("Error inserting push notification for user %s", recipient.user_id)
            result.skipped += 1
            continue
        result.created += 1
        logger.info("Notification inserted with ID: %s", record.id)

        try:
            token = ensure_push_token(recipient.push_token, user_id=recipient.user_id)
        except InvalidTokenError as exc:
            # The record stays CREATED; nothing is sent to this device.
            logger.warning("%s", exc)
            result.skipped += 1
            continue

        messages.append(_build_message(request, recipient, record, token))
    return messages


def _apply_outcome(
    message: PushMessage,
    outcome: PushOutcome,
    records: PushNotificationRepository,
    users: UserRepository,
    result: DispatchResult,
) -> None:
    if outcome.is_ok and outcome.id and outcome.id in result.tickets:
        # A ticket id the gateway already issued for another message in this cycle.
        diagnostic = {
            "status": "error",
            "message": f"Duplicate ticket id {outcome.id}",
            "details": {"error": DUPLICATE_TICKET},
        }
        if records.mark_failed(message.record_id, diagnostic):
            result.failed += 1
        logger.warning(
            "Duplicate ticket %s for notification %s", outcome.id, message.record_id
        )
        return

    if outcome.is_ok and outcome.id:
        if records.mark_submitted(message.record_id, outcome.id):
            result.tickets.register(outcome.id, message.record_id)
            result.submitted += 1
        return

    records.mark_failed(message.record_id, outcome.to_dict())
    result.failed += 1
    logger.warning("Ticket error for notification %s: %s", message.record_id, outcome.to_dict())
    if outcome.is_device_not_registered:
        users.clear_user_token(message.user_id, token=message.to)


def send_push_notifications(
    session: Session,
    request: SendPushRequest,
    *,
    gateway: ExpoPushClient,
    scheduler: ReceiptCheckScheduler,
) -> DispatchResult:
    """Notify every user in ``request`` and schedule the receipt check.

    Records are created before any batch is submitted. A :class:`GatewayError`
    aborts the remaining batches and propagates; records already written keep
    the state they reached and tickets already issued are still reconciled,
    whatever exception ends the cycle. A ticket id repeated by the gateway
    fails the later message instead of sharing the ticket.
    """

    logger.info(
        "Received request to send push notifications to %s users from sender %s",
        len(request.user_ids),
        request.sender_user_id,
    )
    records = PushNotificationRepository(session)
    users = UserRepository(session)
    result = DispatchResult()

    recipients = list(users.list_push_recipients(request.user_ids))
    result.recipients = len(recipients)
    messages = _prepare_messages(request, recipients, records, result)
    logger.info("Prepared %s messages for sending", len(messages))

    try:
        for batch in chunk_messages(messages):
            outcomes = gateway.send(batch)
            for message, outcome in zip(batch, outcomes):
                try:
                    _apply_outcome(message, outcome, records, users, result)
                except PersistenceError:
                    logger.exception(
                        "Could not record push outcome for notification %s", message.record_id
                    )
    except GatewayError:
        logger.exception("Push error: dispatch aborted after %s submitted", result.submitted)
        raise
    finally:
        scheduler.schedule(result.tickets)

    return result


__all__ = ["DispatchResult", "RECORD_ID_DATA_KEY", "send_push_notifications"]
