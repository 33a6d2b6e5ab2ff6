"""Persistence helpers for push notification records."""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    ALLOWED_SOURCE_STATUSES,
    NotificationRecord,
    NotificationStatus,
)
from app.domain.exceptions import PersistenceError
from app.infrastructure.models import PushNotificationModel
from app.utils import ensure_app_timezone, now_in_app_naive_datetime

logger = logging.getLogger(__name__)


def serialize_diagnostic(diagnostic: Any) -> str:
    """Return the JSON text stored in ``error_message``."""

    try:
        return json.dumps(diagnostic, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return json.dumps({"message": str(diagnostic)})


class PushNotificationRepository:
    """Create :class:`NotificationRecord` rows and move them through their states.

    Every status change is a conditional ``UPDATE`` restricted to the states the
    transition may start from, so a record that reached ``DELIVERED`` or
    ``FAILED`` is never modified again.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, record_id: int) -> NotificationRecord | None:
        model = self.session.get(PushNotificationModel, record_id)
        return self._to_entity(model) if model else None

    def create(self, record: NotificationRecord) -> NotificationRecord:
        model = PushNotificationModel(
            user_id=record.user_id,
            sender_user_id=record.sender_user_id,
            token=record.token,
            title=record.title,
            body=record.body,
            data=record.data or {},
            status=int(NotificationStatus.CREATED),
            tournament_id=record.tournament_id,
            created_at=now_in_app_naive_datetime(),
        )
        try:
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        except SQLAlchemyError as exc:
            self.session.rollback()
            msg = f"Could not store push notification for user {record.user_id}"
            raise PersistenceError(msg) from exc
        return self._to_entity(model)

    def mark_submitted(self, record_id: int, ticket_id: str) -> bool:
        return self._transition(
            record_id,
            NotificationStatus.SUBMITTED,
            {PushNotificationModel.ticket_id: ticket_id},
        )

    def mark_failed(self, record_id: int, diagnostic: Any) -> bool:
        return self._transition(
            record_id,
            NotificationStatus.FAILED,
            {PushNotificationModel.error_message: serialize_diagnostic(diagnostic)},
        )

    def mark_delivered(self, record_id: int) -> bool:
        return self._transition(record_id, NotificationStatus.DELIVERED, {})

    def _transition(
        self,
        record_id: int,
        target: NotificationStatus,
        values: dict[Any, Any],
    ) -> bool:
        sources = [int(status) for status in ALLOWED_SOURCE_STATUSES[target]]
        try:
            updated = (
                self.session.query(PushNotificationModel)
                .filter(PushNotificationModel.id == record_id)
                .filter(PushNotificationModel.status.in_(sources))
                .update(
                    {**values, PushNotificationModel.status: int(target)},
                    synchronize_session=False,
                )
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            msg = f"Could not mark push notification {record_id} as {target.name}"
            raise PersistenceError(msg) from exc

        if not updated:
            logger.warning(
                "Ignored transition of push notification %s to %s: record missing or not in %s",
                record_id,
                target.name,
                [NotificationStatus(status).name for status in sources],
            )
            return False
        return True

    @staticmethod
    def _to_entity(model: PushNotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            user_id=model.user_id,
            sender_user_id=model.sender_user_id,
            token=model.token,
            title=model.title,
            body=model.body,
            data=model.data or {},
            status=NotificationStatus(model.status),
            ticket_id=model.ticket_id,
            error_message=model.error_message,
            tournament_id=model.tournament_id,
            created_at=ensure_app_timezone(model.created_at),
            seen_at=ensure_app_timezone(model.seen_at),
        )


__all__ = ["PushNotificationRepository", "serialize_diagnostic"]
