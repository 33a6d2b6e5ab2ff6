"""Value objects exchanged with the push delivery gateway."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

PUSH_STATUS_OK = "ok"
PUSH_STATUS_ERROR = "error"
DEVICE_NOT_REGISTERED = "DeviceNotRegistered"


@dataclass
class PushMessage:
    """Message prepared for one recipient device."""

    record_id: int
    user_id: int
    to: str
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    badge: int = 1
    sound: str = "default"
    priority: str = "high"
    interruption_level: str = "time-sensitive"
    display_in_foreground: bool = True

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body sent to the gateway for this message."""

        return {
            "to": self.to,
            "sound": self.sound,
            "title": self.title,
            "body": self.body,
            "data": self.data,
            "badge": self.badge,
            "priority": self.priority,
            "interruptionLevel": self.interruption_level,
            "_displayInForeground": self.display_in_foreground,
        }


@dataclass(frozen=True)
class PushOutcome:
    """Per-message ticket or per-ticket receipt returned by the gateway."""

    status: str
    id: str | None = None
    message: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "PushOutcome":
        if not isinstance(payload, Mapping):
            return cls(status=PUSH_STATUS_ERROR, message=f"Unexpected entry: {payload!r}")
        details = payload.get("details")
        return cls(
            status=str(payload.get("status") or PUSH_STATUS_ERROR),
            id=payload.get("id"),
            message=payload.get("message"),
            details=dict(details) if isinstance(details, Mapping) else {},
        )

    @property
    def is_ok(self) -> bool:
        return self.status == PUSH_STATUS_OK

    @property
    def error_code(self) -> str | None:
        code = self.details.get("error")
        return str(code) if code else None

    @property
    def is_device_not_registered(self) -> bool:
        return self.error_code == DEVICE_NOT_REGISTERED

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status}
        if self.id is not None:
            payload["id"] = self.id
        if self.message is not None:
            payload["message"] = self.message
        if self.details:
            payload["details"] = dict(self.details)
        return payload


__all__ = [
    "DEVICE_NOT_REGISTERED",
    "PUSH_STATUS_ERROR",
    "PUSH_STATUS_OK",
    "PushMessage",
    "PushOutcome",
]
