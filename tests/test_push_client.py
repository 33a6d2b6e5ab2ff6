"""Unit tests for the Expo push client, batching and token helpers."""

from __future__ import annotations

import json
import types

import pytest
import requests

from app.domain.entities import PushMessage
from app.domain.exceptions import GatewayError, InvalidTokenError, ReceiptReconciliationError
from app.infrastructure.push import (
    ExpoPushClient,
    chunk_messages,
    chunk_receipt_ids,
    ensure_push_token,
    is_push_token,
)


def _response(payload, status_code: int = 200):
    content = json.dumps(payload).encode()

    def _json():
        return json.loads(content)

    return types.SimpleNamespace(status_code=status_code, content=content, json=_json)


class ScriptedSession:
    """Return (or raise) the scripted results in order for every POST."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls: list[dict] = []

    def post(self, url, *, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _message(record_id: int) -> PushMessage:
    return PushMessage(
        record_id=record_id,
        user_id=record_id,
        to=f"ExponentPushToken[{record_id}]",
        title="T",
        body="B",
        data={"m": record_id},
        badge=2,
    )


def _client(session, sleeps: list[float], **kwargs) -> ExpoPushClient:
    return ExpoPushClient(
        base_url="https://push.example.test/api/v2/",
        session=session,
        sleep=sleeps.append,
        **kwargs,
    )


def _ok_tickets(*ids: str):
    return _response({"data": [{"status": "ok", "id": ticket_id} for ticket_id in ids]})


def test_send_returns_outcomes_in_message_order() -> None:
    session = ScriptedSession(
        _response(
            {
                "data": [
                    {"status": "ok", "id": "t-1"},
                    {
                        "status": "error",
                        "message": "not registered",
                        "details": {"error": "DeviceNotRegistered"},
                    },
                ]
            }
        )
    )
    sleeps: list[float] = []

    outcomes = _client(session, sleeps).send([_message(1), _message(2)])

    assert [outcome.status for outcome in outcomes] == ["ok", "error"]
    assert outcomes[0].id == "t-1"
    assert outcomes[1].is_device_not_registered
    assert sleeps == []

    call = session.calls[0]
    assert call["url"] == "https://push.example.test/api/v2/push/send"
    assert call["json"][0] == {
        "to": "ExponentPushToken[1]",
        "sound": "default",
        "title": "T",
        "body": "B",
        "data": {"m": 1},
        "badge": 2,
        "priority": "high",
        "interruptionLevel": "time-sensitive",
        "_displayInForeground": True,
    }
    assert "Authorization" not in call["headers"]


def test_send_retries_three_times_with_exponential_backoff() -> None:
    session = ScriptedSession(
        requests.ConnectionError("boom"),
        requests.Timeout("slow"),
        _response({"errors": [{"code": "INTERNAL", "message": "down"}]}, status_code=503),
    )
    sleeps: list[float] = []

    with pytest.raises(GatewayError) as excinfo:
        _client(session, sleeps).send([_message(1)])

    assert len(session.calls) == 3
    assert sleeps == pytest.approx([0.4, 0.8])
    assert "INTERNAL: down" in str(excinfo.value.__cause__)


def test_send_stops_retrying_after_success_on_second_attempt() -> None:
    session = ScriptedSession(requests.ConnectionError("boom"), _ok_tickets("t-1"))
    sleeps: list[float] = []

    outcomes = _client(session, sleeps).send([_message(1)])

    assert [outcome.id for outcome in outcomes] == ["t-1"]
    assert len(session.calls) == 2
    assert sleeps == pytest.approx([0.4])


def test_ticket_count_mismatch_is_a_batch_failure() -> None:
    session = ScriptedSession(
        _ok_tickets("t-1"),
        _ok_tickets("t-1"),
        _ok_tickets("t-1", "t-2"),
    )
    sleeps: list[float] = []

    outcomes = _client(session, sleeps).send([_message(1), _message(2)])

    assert [outcome.id for outcome in outcomes] == ["t-1", "t-2"]
    assert len(session.calls) == 3


def test_access_token_is_sent_as_bearer_header() -> None:
    session = ScriptedSession(_ok_tickets("t-1"))

    _client(session, [], access_token="expo-secret").send([_message(1)])

    assert session.calls[0]["headers"]["Authorization"] == "Bearer expo-secret"


def test_send_with_empty_batch_does_not_call_gateway() -> None:
    session = ScriptedSession()

    assert _client(session, []).send([]) == []
    assert session.calls == []


def test_fetch_receipts_posts_ids_in_one_request() -> None:
    ticket_ids = ["t-0", "t-1", "t-300"]
    session = ScriptedSession(
        _response(
            {
                "data": {
                    "t-0": {"status": "ok"},
                    "t-300": {
                        "status": "error",
                        "message": "gone",
                        "details": {"error": "DeviceNotRegistered"},
                    }
                }
            }
        ),
    )

    receipts = _client(session, []).fetch_receipts(ticket_ids)

    assert [call["json"]["ids"] for call in session.calls] == [ticket_ids]
    assert session.calls[0]["url"].endswith("/push/getReceipts")
    assert receipts["t-0"].is_ok
    assert receipts["t-300"].is_device_not_registered
    assert "t-1" not in receipts


def test_fetch_receipts_without_ids_does_not_call_gateway() -> None:
    session = ScriptedSession()

    assert _client(session, []).fetch_receipts([]) == {}
    assert session.calls == []


def test_fetch_receipts_wraps_transport_errors() -> None:
    session = ScriptedSession(requests.ConnectionError("boom"))
    sleeps: list[float] = []

    with pytest.raises(ReceiptReconciliationError):
        _client(session, sleeps).fetch_receipts(["t-1"])

    assert len(session.calls) == 1
    assert sleeps == []


def test_chunk_messages_preserves_order_and_limit() -> None:
    messages = list(range(250))

    chunks = chunk_messages(messages)

    assert [len(chunk) for chunk in chunks] == [100, 100, 50]
    assert [item for chunk in chunks for item in chunk] == messages
    assert chunk_receipt_ids([]) == []


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]", True),
        ("ExpoPushToken[abc]", True),
        ("F5741A13-BCDA-434B-A316-5DC0E6FFA94F", True),
        ("ExponentPushToken[missing-bracket", False),
        ("not-a-token", False),
        ("", False),
        (None, False),
    ],
)
def test_is_push_token(token, expected) -> None:
    assert is_push_token(token) is expected


def test_ensure_push_token_raises_for_malformed_token() -> None:
    with pytest.raises(InvalidTokenError, match="user 7"):
        ensure_push_token("bogus", user_id=7)
