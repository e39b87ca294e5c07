"""Tests for the change-feed ingest endpoint."""

from __future__ import annotations

import pytest

from app.config import reset_settings_cache
from app.domain.entities import ChangeOperation
from app.interfaces.api.routes import realtime as realtime_routes


@pytest.fixture()
def published(monkeypatch):
    calls = []

    def fake_publish(table, owner_id, operation, payload):
        calls.append((table, owner_id, operation, payload))
        return 1

    monkeypatch.setattr(realtime_routes.change_feed_broker, "publish", fake_publish)
    return calls


def _change(change_type="INSERT", table="daily_horoscopes", record=None, old_record=None):
    return {
        "type": change_type,
        "table": table,
        "schema": "public",
        "record": record,
        "old_record": old_record,
    }


def test_insert_is_published_for_row_owner(client, published):
    row = {"id": "d1", "user_id": "u1", "content": "Stars align."}

    response = client.post("/realtime/changes", json=_change(record=row))

    assert response.status_code == 202
    assert response.json() == {"delivered": 1}
    assert published == [("daily_horoscopes", "u1", ChangeOperation.INSERTED, row)]


def test_delete_uses_old_record(client, published):
    old = {"id": "m1", "user_id": "u9"}

    response = client.post(
        "/realtime/changes",
        json=_change("DELETE", table="monthly_horoscopes", old_record=old),
    )

    assert response.status_code == 202
    assert published == [("monthly_horoscopes", "u9", ChangeOperation.DELETED, old)]


@pytest.mark.parametrize(
    "payload",
    [
        _change(table="profiles", record={"id": "p1", "user_id": "u1"}),
        _change(record={"id": "d1"}),
    ],
)
def test_unwatched_or_ownerless_changes_are_ignored(client, published, payload):
    response = client.post("/realtime/changes", json=payload)

    assert response.status_code == 202
    assert response.json() == {"delivered": 0}
    assert published == []


def test_unknown_change_type_is_rejected(client, published):
    response = client.post("/realtime/changes", json=_change("TRUNCATE"))

    assert response.status_code == 422


def test_webhook_secret_is_enforced(client, published, monkeypatch):
    monkeypatch.setenv("REALTIME_WEBHOOK_SECRET", "s3cret")
    reset_settings_cache()
    try:
        body = _change(record={"id": "d1", "user_id": "u1"})
        missing = client.post("/realtime/changes", json=body)
        wrong = client.post("/realtime/changes", json=body, headers={"X-Webhook-Secret": "nope"})
        right = client.post("/realtime/changes", json=body, headers={"X-Webhook-Secret": "s3cret"})
    finally:
        monkeypatch.delenv("REALTIME_WEBHOOK_SECRET")
        reset_settings_cache()

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert right.status_code == 202
    assert len(published) == 1
