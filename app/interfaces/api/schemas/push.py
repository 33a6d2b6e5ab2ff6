"""Pydantic models describing push dispatch payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SendPushRequestBody(BaseModel):
    """Body accepted by ``POST /send-push``.

    Every field is optional at this level so missing values are reported by the
    use case validation as a single client error.
    """

    user_ids: list[int] | None = Field(default=None, description="Recipient user identifiers")
    sender_user_id: int | None = Field(default=None, description="User sending the notification")
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] | None = Field(
        default=None, description="Extra payload delivered with the notification"
    )
    tournament_id: int | None = None


class SendPushResponse(BaseModel):
    """Result returned once dispatch finished and receipts are scheduled."""

    success: bool = True
    message: str = "Push notifications sent and receipt check scheduled."


__all__ = ["SendPushRequestBody", "SendPushResponse"]
