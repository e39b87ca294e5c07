"""Tests for the per-identity subscription lifecycle."""

from __future__ import annotations

import asyncio

from app.application.use_cases.notifications import SubscriptionManager
from app.domain.entities import ChangeOperation, ResourceClass

ALL_CLASSES = frozenset(ResourceClass)


async def _ignore(event) -> None:
    return None


def _open_view(feed):
    return sorted((handle.owner_id, handle.resource_class.value) for handle in feed.open_handles())


def test_open_handles_always_match_current_identity(fake_feed):
    manager = SubscriptionManager(fake_feed, _ignore)

    manager.on_identity_changed("u1")
    assert _open_view(fake_feed) == [("u1", "daily"), ("u1", "monthly"), ("u1", "weekly")]

    manager.on_identity_changed("u2")
    assert _open_view(fake_feed) == [("u2", "daily"), ("u2", "monthly"), ("u2", "weekly")]

    manager.on_identity_changed(None)
    assert _open_view(fake_feed) == []
    assert manager.open_resource_classes == frozenset()

    manager.on_identity_changed("u3")
    assert _open_view(fake_feed) == [("u3", "daily"), ("u3", "monthly"), ("u3", "weekly")]
    assert manager.open_resource_classes == ALL_CLASSES


def test_sign_out_closes_every_handle_exactly_once(fake_feed):
    manager = SubscriptionManager(fake_feed, _ignore)
    manager.on_identity_changed("u1")
    opened = list(fake_feed.handles)

    manager.on_identity_changed(None)
    manager.close()

    assert len(opened) == 3
    assert [handle.close_calls for handle in opened] == [1, 1, 1]


def test_old_handles_close_before_new_ones_open(fake_feed):
    manager = SubscriptionManager(fake_feed, _ignore)
    manager.on_identity_changed("u1")
    fake_feed.log.clear()

    manager.on_identity_changed("u2")

    actions = [(action, owner) for action, owner, _ in fake_feed.log]
    assert actions == [("close", "u1")] * 3 + [("open", "u2")] * 3


def test_failed_subscription_leaves_other_classes_open(feed_factory, caplog):
    feed = feed_factory(failing={ResourceClass.WEEKLY})
    manager = SubscriptionManager(feed, _ignore)

    with caplog.at_level("ERROR"):
        manager.on_identity_changed("u1")

    assert manager.open_resource_classes == frozenset({ResourceClass.DAILY, ResourceClass.MONTHLY})
    assert "weekly_horoscopes" in caplog.text


def test_callbacks_forward_change_events_with_resource_class(fake_feed):
    async def _run():
        received = []

        async def on_change(event):
            received.append(event)

        manager = SubscriptionManager(fake_feed, on_change)
        manager.on_identity_changed("u1")
        daily = next(h for h in fake_feed.handles if h.resource_class is ResourceClass.DAILY)

        await daily.on_inserted({"id": "d1"})
        await daily.on_updated({"id": "d1"})

        assert [(e.resource_class, e.operation, e.payload) for e in received] == [
            (ResourceClass.DAILY, ChangeOperation.INSERTED, {"id": "d1"}),
            (ResourceClass.DAILY, ChangeOperation.UPDATED, {"id": "d1"}),
        ]

    asyncio.run(_run())
