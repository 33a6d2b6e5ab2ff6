"""SQLAlchemy model for persisted push notifications."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, SmallInteger, String, Text

from app.domain.entities import NotificationStatus
from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class PushNotificationModel(Base):
    """Database representation of one push notification sent to one user."""

    __tablename__ = "push_notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    sender_user_id = Column(Integer, nullable=False)
    token = Column(String(255), nullable=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    status = Column(
        SmallInteger,
        nullable=False,
        default=int(NotificationStatus.CREATED),
        index=True,
    )
    error_message = Column(Text, nullable=True)
    ticket_id = Column(String(64), nullable=True, index=True)
    tournament_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    seen_at = Column(DateTime(), nullable=True)


__all__ = ["PushNotificationModel"]
