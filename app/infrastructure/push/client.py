"""HTTP client for the Expo push notification service."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

import requests

from app.config import Settings, get_settings
from app.domain.entities import PushMessage, PushOutcome
from app.domain.exceptions import GatewayError, ReceiptReconciliationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 0.2


def _extract_gateway_error_details(body: Any) -> str | None:
    """Return a human readable description for an Expo error payload."""

    if body in (None, "", b""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                code = item.get("code")
                message = item.get("message")
                if code and message:
                    messages.append(f"{code}: {message}")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        return json.dumps(parsed)

    return None


class ExpoPushClient:
    """Submit message batches and fetch delivery receipts.

    ``send`` retries a failing batch up to ``max_attempts`` times, sleeping
    ``retry_base_delay * 2 ** attempt`` seconds after each failed attempt.
    """

    def __init__(
        self,
        *,
        base_url: str,
        access_token: str | None = None,
        timeout: float = 10.0,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.session = session or requests.Session()
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> "ExpoPushClient":
        settings = settings or get_settings()
        options: dict[str, Any] = {
            "base_url": settings.expo_api_url,
            "access_token": settings.expo_access_token,
            "timeout": settings.push_request_timeout_seconds,
            "max_attempts": settings.push_max_attempts,
            "retry_base_delay": settings.push_retry_base_delay_seconds,
        }
        options.update(overrides)
        return cls(**options)

    def retry_delay(self, attempt: int) -> float:
        """Seconds to wait after the failed ``attempt`` (counted from 1)."""

        return self.retry_base_delay * (2**attempt)

    def send(self, messages: Sequence[PushMessage]) -> list[PushOutcome]:
        """Submit one batch and return one outcome per message, in order."""

        if not messages:
            return []

        payload = [message.to_payload() for message in messages]
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._send_once(payload)
            except (requests.RequestException, GatewayError) as exc:
                logger.error(
                    "Push submission attempt %s/%s failed: %s",
                    attempt,
                    self.max_attempts,
                    exc,
                )
                if attempt >= self.max_attempts:
                    msg = f"Push gateway rejected the batch after {self.max_attempts} attempts"
                    raise GatewayError(msg) from exc
                self._sleep(self.retry_delay(attempt))

        raise GatewayError("Push gateway was never attempted")  # pragma: no cover

    def fetch_receipts(self, ticket_ids: Sequence[str]) -> dict[str, PushOutcome]:
        """Return the receipts available for ``ticket_ids`` keyed by ticket id.

        One request is made; callers split larger sets with
        :func:`chunk_receipt_ids`. Tickets whose receipt is not
        ready yet are simply absent from the result.
        """

        ids = list(ticket_ids)
        if not ids:
            return {}
        try:
            data = self._post("/push/getReceipts", {"ids": ids})
        except (requests.RequestException, GatewayError) as exc:
            msg = f"Could not fetch receipts for {len(ids)} tickets"
            raise ReceiptReconciliationError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Unexpected receipts payload: {data!r}"
            raise ReceiptReconciliationError(msg)
        return {
            str(ticket_id): PushOutcome.from_payload(receipt)
            for ticket_id, receipt in data.items()
        }

    def _send_once(self, payload: list[dict[str, Any]]) -> list[PushOutcome]:
        data = self._post("/push/send", payload)
        if not isinstance(data, list):
            raise GatewayError(f"Unexpected tickets payload: {data!r}")
        if len(data) != len(payload):
            msg = f"Expected {len(payload)} push tickets but received {len(data)}"
            raise GatewayError(msg)
        return [PushOutcome.from_payload(entry) for entry in data]

    def _post(self, path: str, body: Any) -> Any:
        response = self.session.post(
            f"{self.base_url}{path}",
            json=body,
            headers=self._headers(),
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            details = _extract_gateway_error_details(getattr(response, "content", None))
            if details:
                raise GatewayError(
                    f"Expo push API responded with status {response.status_code}: {details}"
                )
            raise GatewayError(f"Expo push API responded with status {response.status_code}")

        try:
            parsed = response.json()
        except ValueError as exc:
            raise GatewayError("Push gateway returned a non JSON body") from exc

        if not isinstance(parsed, dict) or "data" not in parsed:
            details = _extract_gateway_error_details(parsed)
            raise GatewayError(f"Push gateway response without data: {details}")
        return parsed["data"]

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers


__all__ = ["DEFAULT_MAX_ATTEMPTS", "DEFAULT_RETRY_BASE_DELAY", "ExpoPushClient"]
