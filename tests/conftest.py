"""Shared fixtures; configures the environment before ``app`` is imported."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / "horoscope_relay_test.db"
JWT_SECRET = "test-jwt-secret"

os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SUPABASE_JWT_SECRET"] = JWT_SECRET
os.environ["PERMISSION_REQUEST_TIMEOUT_SECONDS"] = "5"
os.environ.pop("REALTIME_WEBHOOK_SECRET", None)

from app.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from app.domain.entities import NotificationIntent, PermissionState, ResourceClass  # noqa: E402


class FakeHandle:
    """Subscription handle that records when it is closed."""

    def __init__(self, feed: "FakeChangeFeed", resource_class: ResourceClass, owner_id: str, on_inserted, on_updated):
        self.feed = feed
        self.resource_class = resource_class
        self.owner_id = owner_id
        self.on_inserted = on_inserted
        self.on_updated = on_updated
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        self.feed.log.append(("close", self.owner_id, self.resource_class))


class FakeChangeFeed:
    """Change feed double that keeps an ordered log of opens and closes."""

    def __init__(self, failing: set[ResourceClass] | None = None) -> None:
        self.failing = failing or set()
        self.handles: list[FakeHandle] = []
        self.log: list[tuple[str, str, ResourceClass]] = []

    def subscribe(self, resource_class, *, owner_id, on_inserted, on_updated):
        from app.infrastructure.notifications import ChangeFeedError

        if resource_class in self.failing:
            raise ChangeFeedError("transport error")
        handle = FakeHandle(self, resource_class, owner_id, on_inserted, on_updated)
        self.handles.append(handle)
        self.log.append(("open", owner_id, resource_class))
        return handle

    def open_handles(self) -> list[FakeHandle]:
        return [handle for handle in self.handles if handle.close_calls == 0]


class RecordingSink:
    """Notification sink that captures every delivered intent."""

    def __init__(self, permission: PermissionState = PermissionState.GRANTED) -> None:
        self.permission = permission
        self.permission_requests = 0
        self.delivered: list[NotificationIntent] = []
        self.listeners: list[Any] = []

    async def request_permission(self) -> PermissionState:
        self.permission_requests += 1
        return self.permission

    async def deliver(self, intent: NotificationIntent) -> None:
        self.delivered.append(intent)

    def listen(self, on_received, on_response):
        handle = _RemovableListener(self.listeners, (on_received, on_response))
        self.listeners.append(handle.entry)
        return [handle]


class _RemovableListener:
    def __init__(self, registry: list[Any], entry: Any) -> None:
        self.registry = registry
        self.entry = entry

    def remove(self) -> None:
        if self.entry in self.registry:
            self.registry.remove(self.entry)


@pytest.fixture()
def fake_feed() -> FakeChangeFeed:
    return FakeChangeFeed()


@pytest.fixture()
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def feed_factory():
    return FakeChangeFeed


@pytest.fixture()
def sink_factory():
    return RecordingSink


@pytest.fixture()
def make_token():
    """Return a factory of Supabase-style access tokens."""

    from datetime import datetime, timedelta, timezone

    from jose import jwt

    def _make(user_id: str, *, secret: str = JWT_SECRET, audience: str = "authenticated") -> str:
        claims = {
            "sub": user_id,
            "aud": audience,
            "role": "authenticated",
            "exp": datetime.now(tz=timezone.utc) + timedelta(minutes=5),
        }
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make


@pytest.fixture()
def client():
    """Return a test client bound to a clean application instance."""

    pytest.importorskip("httpx")
    from fastapi.testclient import TestClient

    from app.infrastructure.database import Base, engine, initialize_database
    from main import create_app

    Base.metadata.drop_all(bind=engine, checkfirst=True)
    initialize_database()
    with TestClient(create_app()) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=engine, checkfirst=True)
