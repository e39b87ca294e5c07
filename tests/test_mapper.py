"""Tests for the change-event to notification mapping."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import map_change_event, map_event
from app.domain.entities import ChangeEvent, ChangeOperation, ResourceClass


@pytest.mark.parametrize(
    ("resource_class", "operation", "title", "body"),
    [
        ("daily", "inserted", "Your Daily Horoscope is Ready!", "Discover what the stars have in store for you today."),
        ("daily", "updated", "Your Daily Horoscope Updated", "Your cosmic insights have been refreshed."),
        ("weekly", "inserted", "Your Weekly Horoscope is Here!", "Plan your week with cosmic guidance."),
        ("weekly", "updated", "Weekly Horoscope Updated", "Your weekly cosmic forecast has been updated."),
        ("monthly", "inserted", "Your Monthly Horoscope Awaits!", "Explore your cosmic journey for the month ahead."),
        ("monthly", "updated", "Monthly Horoscope Refreshed", "Your monthly cosmic insights have been updated."),
    ],
)
def test_every_watched_change_has_fixed_copy(resource_class, operation, title, body):
    payload = {"id": "row-1", "content": "..."}

    intent = map_change_event(resource_class, operation, payload)

    assert intent is not None
    assert intent.title == title
    assert intent.body == body
    assert intent.data == {"resource_class": resource_class, "payload": payload}
    assert intent.data["payload"] is payload


@pytest.mark.parametrize("operation", ["deleted", "truncated", ""])
def test_other_operations_are_ignored(operation):
    assert map_change_event(ResourceClass.DAILY, operation, {"id": "d1"}) is None


def test_unknown_resource_class_is_ignored():
    assert map_change_event("yearly", ChangeOperation.INSERTED, {}) is None


def test_map_event_accepts_change_events():
    event = ChangeEvent(ResourceClass.WEEKLY, ChangeOperation.UPDATED, {"id": "w1"})

    intent = map_event(event)

    assert intent is not None
    assert intent.title == "Weekly Horoscope Updated"
    assert intent.data == {"resource_class": "weekly", "payload": {"id": "w1"}}
