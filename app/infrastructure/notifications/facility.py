"""Device notification facility backed by the client's websocket."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol

from fastapi import WebSocket

from app.domain.entities import PermissionState

logger = logging.getLogger(__name__)

FacilityListener = Callable[[Any], "Awaitable[None] | None"]


class ListenerHandle(Protocol):
    def remove(self) -> None: ...


class NotificationFacility(Protocol):
    """Port: the local-notification service of a device."""

    async def get_permissions(self) -> PermissionState: ...

    async def request_permissions(self) -> PermissionState: ...

    async def schedule(self, request: dict[str, Any]) -> None: ...

    def add_received_listener(self, listener: FacilityListener) -> ListenerHandle: ...

    def add_response_listener(self, listener: FacilityListener) -> ListenerHandle: ...


class FacilityListenerHandle:
    """Registration returned by ``add_*_listener``; ``remove`` is idempotent."""

    def __init__(self, listeners: list[FacilityListener], listener: FacilityListener) -> None:
        self._listeners = listeners
        self._listener = listener
        self.removed = False

    def remove(self) -> None:
        if self.removed:
            return
        self.removed = True
        try:
            self._listeners.remove(self._listener)
        except ValueError:
            pass


class DeviceNotificationFacility:
    """Drive a connected device's notification service over its websocket.

    The device announces its permission status with ``permissions`` messages,
    and reports ``received`` and ``response`` events for delivered
    notifications. Those messages are fed in through :meth:`handle_message`.
    """

    def __init__(
        self,
        websocket: WebSocket,
        *,
        permission: PermissionState = PermissionState.UNKNOWN,
        permission_timeout: float = 60.0,
    ) -> None:
        self._websocket = websocket
        self._permission = permission
        self._permission_timeout = permission_timeout
        self._pending_permission: asyncio.Future[PermissionState] | None = None
        self._received_listeners: list[FacilityListener] = []
        self._response_listeners: list[FacilityListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._received_listeners) + len(self._response_listeners)

    async def get_permissions(self) -> PermissionState:
        return self._permission

    async def request_permissions(self) -> PermissionState:
        """Prompt the device and wait for its answer.

        A device that does not answer within the timeout is treated as having
        denied the prompt.
        """

        pending = self._pending_permission
        if pending is None or pending.done():
            pending = asyncio.get_running_loop().create_future()
            self._pending_permission = pending
            await self._websocket.send_json({"type": "permission-request"})
        try:
            status = await asyncio.wait_for(asyncio.shield(pending), self._permission_timeout)
        except asyncio.TimeoutError:
            logger.warning("Device did not answer the notification permission prompt")
            # The next request prompts again; a late answer still updates the state.
            if self._pending_permission is pending:
                self._pending_permission = None
            status = PermissionState.DENIED
        self._permission = status
        return status

    async def schedule(self, request: dict[str, Any]) -> None:
        await self._websocket.send_json({"type": "notification", "data": request})

    def add_received_listener(self, listener: FacilityListener) -> FacilityListenerHandle:
        self._received_listeners.append(listener)
        return FacilityListenerHandle(self._received_listeners, listener)

    def add_response_listener(self, listener: FacilityListener) -> FacilityListenerHandle:
        self._response_listeners.append(listener)
        return FacilityListenerHandle(self._response_listeners, listener)

    async def handle_message(self, message: dict[str, Any]) -> bool:
        """Consume facility messages; returns ``False`` for unrelated ones."""

        message_type = message.get("type")
        if message_type == "permissions":
            self._resolve_permission(PermissionState.parse(message.get("status")))
            return True
        if message_type == "received":
            await self._notify(self._received_listeners, message.get("data"))
            return True
        if message_type == "response":
            await self._notify(self._response_listeners, message.get("data"))
            return True
        return False

    def _resolve_permission(self, status: PermissionState) -> None:
        self._permission = status
        pending = self._pending_permission
        if pending is not None and not pending.done():
            pending.set_result(status)

    @staticmethod
    async def _notify(listeners: list[FacilityListener], data: Any) -> None:
        for listener in list(listeners):
            try:
                result = listener(data)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Notification listener failed")


__all__ = [
    "DeviceNotificationFacility",
    "FacilityListener",
    "FacilityListenerHandle",
    "ListenerHandle",
    "NotificationFacility",
]
