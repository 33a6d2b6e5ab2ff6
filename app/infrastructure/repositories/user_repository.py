"""Persistence layer for push recipients stored in the users table."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import PushRecipient
from app.domain.exceptions import PersistenceError
from app.infrastructure.models import PushNotificationModel, UserModel

logger = logging.getLogger(__name__)


class UserRepository:
    """Read device tokens and unread counts, and invalidate dead tokens."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_push_recipients(self, user_ids: Iterable[int]) -> Sequence[PushRecipient]:
        """Return the users in ``user_ids`` that have (or claim to have) a token.

        ``unread_count`` counts the user's notifications that were never seen
        or were seen before they were created.
        """

        ids = sorted({int(user_id) for user_id in user_ids})
        if not ids:
            return []

        unread_count = (
            select(func.count(PushNotificationModel.id))
            .where(PushNotificationModel.user_id == UserModel.id)
            .where(
                or_(
                    PushNotificationModel.seen_at.is_(None),
                    PushNotificationModel.seen_at < PushNotificationModel.created_at,
                )
            )
            .correlate(UserModel)
            .scalar_subquery()
        )
        query = (
            self.session.query(
                UserModel.id,
                UserModel.push_token,
                unread_count.label("unread_count"),
            )
            .filter(UserModel.id.in_(ids))
            .filter(
                or_(
                    UserModel.push_token.is_not(None),
                    UserModel.has_push_token.is_(True),
                )
            )
            .order_by(UserModel.id)
        )
        return [
            PushRecipient(
                user_id=row.id,
                push_token=row.push_token,
                unread_count=int(row.unread_count or 0),
            )
            for row in query.all()
        ]

    def clear_user_token(self, user_id: int, *, token: str | None = None) -> bool:
        """Forget the device token of ``user_id``.

        When ``token`` is given the token is only cleared while the user still
        holds that exact value.
        """

        query = self.session.query(UserModel).filter(UserModel.id == user_id)
        if token is not None:
            query = query.filter(UserModel.push_token == token)
        try:
            updated = query.update(
                {UserModel.push_token: None, UserModel.has_push_token: False},
                synchronize_session=False,
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"Could not clear push token for user {user_id}") from exc

        if updated:
            logger.warning("Push token removed for user %s (device not registered)", user_id)
        return bool(updated)


__all__ = ["UserRepository"]
