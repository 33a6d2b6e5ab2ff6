"""Shared fixtures for the push dispatch tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

TEST_DB_PATH = Path(__file__).parent / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["PUSH_SHARED_SECRET"] = "test-shared-secret"
os.environ["APP_TIMEZONE"] = "UTC"

from app.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.domain.entities import PushOutcome  # noqa: E402
from app.domain.exceptions import GatewayError  # noqa: E402
from app.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from app.infrastructure.models import UserModel  # noqa: E402


class FakeGateway:
    """In-memory stand-in for :class:`ExpoPushClient`."""

    def __init__(self, *, failing_batches: tuple[int, ...] = ()) -> None:
        self.failing_batches = failing_batches
        self.sent: list[list] = []
        self.outcomes_by_token: dict[str, PushOutcome] = {}
        self.receipts: dict[str, PushOutcome] = {}
        self.receipt_calls: list[list[str]] = []
        self.receipt_error: Exception | None = None

    def send(self, batch):
        self.sent.append(list(batch))
        if len(self.sent) in self.failing_batches:
            raise GatewayError("gateway unavailable")
        return [
            self.outcomes_by_token.get(
                message.to,
                PushOutcome(status="ok", id=f"ticket-{message.record_id}"),
            )
            for message in batch
        ]

    def fetch_receipts(self, ticket_ids):
        self.receipt_calls.append(list(ticket_ids))
        if self.receipt_error is not None:
            raise self.receipt_error
        return {
            ticket_id: self.receipts[ticket_id]
            for ticket_id in ticket_ids
            if ticket_id in self.receipts
        }

    @property
    def sent_messages(self) -> list:
        return [message for batch in self.sent for message in batch]


class FakeScheduler:
    """Collect the trackers handed over for a later receipt check."""

    def __init__(self) -> None:
        self.scheduled: list = []

    def schedule(self, tracker) -> None:
        self.scheduled.append(tracker)


def _add_user(
    session,
    user_id: int,
    token: str | None,
    *,
    has_push_token: bool | None = None,
) -> None:
    session.add(
        UserModel(
            id=user_id,
            push_token=token,
            has_push_token=bool(token) if has_push_token is None else has_push_token,
        )
    )
    session.commit()


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure every test starts from an empty schema."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def add_user(session):
    """Insert a user row; ``has_push_token`` defaults to whether a token is set."""

    def _factory(user_id: int, token: str | None, *, has_push_token: bool | None = None) -> None:
        _add_user(session, user_id, token, has_push_token=has_push_token)

    return _factory


@pytest.fixture(scope="session", autouse=True)
def remove_test_database():
    yield
    engine.dispose()
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()
