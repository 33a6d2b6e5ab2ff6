"""SQLAlchemy model for the users table."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.sql import expression

from app.infrastructure.database import Base


class UserModel(Base):
    """Push-related columns of the user account table.

    The table belongs to the account system; this service only reads the
    device token and clears it when the gateway reports the device as gone.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    push_token = Column(String(255), nullable=True)
    has_push_token = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )


__all__ = ["UserModel"]
