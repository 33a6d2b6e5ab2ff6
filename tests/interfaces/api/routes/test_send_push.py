"""Tests for the ``POST /send-push`` endpoint."""

from __future__ import annotations

import time

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from app.application.use_cases.push_notifications import ReceiptReconciler
from app.domain.entities import NotificationStatus, PushOutcome
from app.infrastructure.database import SessionLocal
from app.infrastructure.models import PushNotificationModel, UserModel
from app.infrastructure.push import ReceiptCheckScheduler
from app.interfaces.api.dependencies import get_push_gateway, get_receipt_scheduler
from main import create_app

AUTH_HEADERS = {"Authorization": "Bearer test-shared-secret"}
PAYLOAD = {"user_ids": [1, 2], "sender_user_id": 9, "title": "T", "body": "B"}


@pytest.fixture()
def app(gateway, scheduler):
    application = create_app()
    application.dependency_overrides[get_push_gateway] = lambda: gateway
    application.dependency_overrides[get_receipt_scheduler] = lambda: scheduler
    return application


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _statuses(session) -> dict[int, int]:
    session.expire_all()
    return {
        model.user_id: model.status for model in session.query(PushNotificationModel).all()
    }


def test_send_push_dispatches_and_schedules_receipts(client, add_user, session, scheduler) -> None:
    add_user(1, "ExponentPushToken[one]")
    add_user(2, "ExponentPushToken[two]")

    response = client.post("/send-push", json=PAYLOAD, headers=AUTH_HEADERS)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert _statuses(session) == {
        1: NotificationStatus.SUBMITTED,
        2: NotificationStatus.SUBMITTED,
    }
    assert len(scheduler.scheduled[0]) == 2


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "test-shared-secret"},
        {"Authorization": "Bearer wrong-secret"},
        {"Authorization": "Basic test-shared-secret"},
    ],
)
def test_send_push_rejects_bad_credentials(client, headers, gateway) -> None:
    response = client.post("/send-push", json=PAYLOAD, headers=headers)

    assert response.status_code == 403
    assert response.json() == {"detail": "Forbidden"}
    assert gateway.sent == []


@pytest.mark.parametrize(
    "payload",
    [
        {"sender_user_id": 9, "title": "T", "body": "B"},
        {"user_ids": [], "sender_user_id": 9, "title": "T", "body": "B"},
        {"user_ids": [1], "title": "T", "body": "B"},
        {"user_ids": [1], "sender_user_id": 9, "body": "B"},
        {"user_ids": [1], "sender_user_id": 9, "title": "T", "body": ""},
        {"user_ids": "all", "sender_user_id": 9, "title": "T", "body": "B"},
    ],
)
def test_send_push_rejects_missing_fields(client, payload, session) -> None:
    response = client.post("/send-push", json=payload, headers=AUTH_HEADERS)

    assert response.status_code == 400
    assert _statuses(session) == {}


def test_send_push_returns_500_when_gateway_is_exhausted(
    client, add_user, session, gateway
) -> None:
    add_user(1, "ExponentPushToken[one]")
    gateway.failing_batches = (1,)

    response = client.post("/send-push", json=PAYLOAD, headers=AUTH_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to send notifications"}
    assert _statuses(session) == {1: NotificationStatus.CREATED}


def test_health_does_not_require_credentials(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_preflight_allows_browser_origins(client) -> None:
    response = client.options(
        "/send-push",
        headers={
            "Origin": "https://admin.example.test",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization,content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://admin.example.test"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_receipts_are_reconciled_after_the_response(add_user, session, gateway) -> None:
    add_user(1, "ExponentPushToken[one]")
    add_user(2, "ExponentPushToken[two]")
    real_scheduler = ReceiptCheckScheduler(
        ReceiptReconciler(gateway=gateway, session_factory=SessionLocal),
        delay=0.5,
    )
    application = create_app()
    application.dependency_overrides[get_push_gateway] = lambda: gateway
    application.dependency_overrides[get_receipt_scheduler] = lambda: real_scheduler

    with TestClient(application) as test_client:
        response = test_client.post("/send-push", json=PAYLOAD, headers=AUTH_HEADERS)
        assert response.status_code == 200

        session.expire_all()
        records = {
            model.user_id: model for model in session.query(PushNotificationModel).all()
        }
        gateway.receipts[records[1].ticket_id] = PushOutcome(status="ok")
        gateway.receipts[records[2].ticket_id] = PushOutcome(
            status="error", details={"error": "DeviceNotRegistered"}
        )

        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if NotificationStatus.SUBMITTED not in _statuses(session).values():
                break
            time.sleep(0.05)

    assert len(gateway.receipt_calls) == 1
    assert _statuses(session) == {
        1: NotificationStatus.DELIVERED,
        2: NotificationStatus.FAILED,
    }
    assert session.get(UserModel, 2).push_token is None
