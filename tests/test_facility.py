"""Tests for the websocket-backed device notification facility."""

from __future__ import annotations

import asyncio

from app.domain.entities import PermissionState
from app.infrastructure.notifications import DeviceNotificationFacility


class FakeWebSocket:
    def __init__(self):
        self.sent = []

    async def send_json(self, data):
        self.sent.append(data)


def test_permission_prompt_waits_for_device_answer():
    async def scenario():
        websocket = FakeWebSocket()
        facility = DeviceNotificationFacility(websocket, permission_timeout=1.0)

        prompt = asyncio.create_task(facility.request_permissions())
        await asyncio.sleep(0)
        assert websocket.sent == [{"type": "permission-request"}]

        handled = await facility.handle_message({"type": "permissions", "status": "granted"})
        status = await prompt
        return handled, status, await facility.get_permissions()

    handled, status, current = asyncio.run(scenario())

    assert handled is True
    assert status is PermissionState.GRANTED
    assert current is PermissionState.GRANTED


def test_unanswered_prompt_counts_as_denied(caplog):
    websocket = FakeWebSocket()
    facility = DeviceNotificationFacility(websocket, permission_timeout=0.01)

    with caplog.at_level("WARNING"):
        status = asyncio.run(facility.request_permissions())

    assert status is PermissionState.DENIED
    assert "did not answer" in caplog.text


def test_listeners_receive_device_events_until_removed():
    received, responses = [], []
    facility = DeviceNotificationFacility(FakeWebSocket())
    received_handle = facility.add_received_listener(received.append)
    facility.add_response_listener(responses.append)

    async def scenario():
        await facility.handle_message({"type": "received", "data": {"id": 1}})
        await facility.handle_message({"type": "response", "data": {"id": 2}})
        received_handle.remove()
        received_handle.remove()
        await facility.handle_message({"type": "received", "data": {"id": 3}})
        return await facility.handle_message({"type": "ping"})

    handled_ping = asyncio.run(scenario())

    assert received == [{"id": 1}]
    assert responses == [{"id": 2}]
    assert facility.listener_count == 1
    assert handled_ping is False


def test_failing_listener_does_not_stop_others(caplog):
    seen = []
    facility = DeviceNotificationFacility(FakeWebSocket())

    def broken(_data):
        raise RuntimeError("boom")

    facility.add_response_listener(broken)
    facility.add_response_listener(seen.append)

    asyncio.run(facility.handle_message({"type": "response", "data": "tap"}))

    assert seen == ["tap"]
    assert "Notification listener failed" in caplog.text


def test_schedule_sends_notification_message():
    websocket = FakeWebSocket()
    facility = DeviceNotificationFacility(websocket)

    asyncio.run(facility.schedule({"content": {"title": "t"}, "trigger": None}))

    assert websocket.sent == [
        {"type": "notification", "data": {"content": {"title": "t"}, "trigger": None}}
    ]


def test_prompt_is_sent_again_after_a_timeout():
    async def scenario():
        websocket = FakeWebSocket()
        facility = DeviceNotificationFacility(websocket, permission_timeout=0.01)

        first = await facility.request_permissions()
        second = asyncio.create_task(facility.request_permissions())
        await asyncio.sleep(0)
        await facility.handle_message({"type": "permissions", "status": "granted"})
        return first, await second, websocket.sent

    first, second, sent = asyncio.run(scenario())

    assert first is PermissionState.DENIED
    assert second is PermissionState.GRANTED
    assert sent == [{"type": "permission-request"}] * 2
