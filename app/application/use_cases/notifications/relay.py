"""Per-connection relay from horoscope changes to device notifications."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

from app.domain.entities import ChangeEvent, NotificationPreference
from app.infrastructure.notifications.facility import ListenerHandle
from app.infrastructure.notifications.realtime import ChangeFeed
from app.infrastructure.notifications.sinks import NotificationSink

from .dispatcher import NotificationDispatcher
from .interaction import InteractionRouter
from .mapper import map_event
from .session import SessionGate
from .subscriptions import SubscriptionManager

logger = logging.getLogger(__name__)

PreferenceLoader = Callable[[str], Awaitable[NotificationPreference]]
StateListener = Callable[[str | None, bool], "Awaitable[None] | None"]


class NotificationRelay:
    """Tie a session gate to subscriptions, dispatch and tap routing.

    Identity changes submitted with :meth:`submit_identity` are applied one at
    a time, in order, by a worker task started with :meth:`start`. Permission
    negotiation and listener registration run in a separate setup task, so a
    pending permission prompt never holds up a later sign-out.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        sink: NotificationSink,
        *,
        gate: SessionGate | None = None,
        router: InteractionRouter | None = None,
        preferences: PreferenceLoader | None = None,
        on_state: StateListener | None = None,
    ) -> None:
        self.gate = gate or SessionGate()
        self.dispatcher = NotificationDispatcher(sink)
        self.router = router or InteractionRouter()
        self.subscriptions = SubscriptionManager(feed, self.handle_change)
        self._load_preferences = preferences
        self._preference: NotificationPreference | None = None
        self._on_state = on_state
        self._listener_handles: list[ListenerHandle] = []
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._setup: asyncio.Task[None] | None = None
        self._unsubscribe_gate = self.gate.subscribe(self._on_identity)

    @property
    def identity(self) -> str | None:
        return self.gate.identity

    @property
    def preference(self) -> NotificationPreference | None:
        return self._preference

    def start(self) -> None:
        if self._worker is None:
            self._worker = asyncio.get_running_loop().create_task(self._run())

    def submit_identity(self, identity: str | None) -> None:
        """Queue an identity change.

        Leaving the current identity takes effect immediately: its handles and
        listeners are gone before this returns, even while earlier changes are
        still queued.
        """

        if (identity or None) != self.gate.identity:
            self._tear_down()
        self._queue.put_nowait(identity)

    async def apply_identity(self, identity: str | None) -> None:
        """Apply ``identity`` now and wait for its notification setup."""

        await self.gate.set_identity(identity)
        await self.wait_ready()

    async def wait_ready(self) -> None:
        """Wait for the current setup task, if any, to finish."""

        setup = self._setup
        if setup is not None:
            await asyncio.wait([setup])

    def renew_permission(self) -> None:
        """Ask the sink for permission again and register listeners if granted.

        Used when the device asks for a new prompt or reports a grant after an
        earlier denial.
        """

        identity = self.identity
        if identity is None:
            return
        self._start_setup(identity, force=True)

    async def refresh_preferences(self) -> None:
        identity = self.identity
        if identity is None or self._load_preferences is None:
            return
        try:
            self._preference = await self._load_preferences(identity)
        except Exception:
            logger.exception("Could not load notification preferences for %s", identity)

    async def handle_change(self, event: ChangeEvent) -> None:
        intent = map_event(event)
        if intent is None:
            return
        if self._preference is not None and not self._preference.allows(event.resource_class):
            logger.debug(
                "Notifications for %s are disabled by preference", event.resource_class.value
            )
            return
        await self.dispatcher.dispatch(intent)

    async def close(self) -> None:
        """Stop the worker and tear down subscriptions and listeners."""

        worker, self._worker = self._worker, None
        if worker is not None:
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        self._unsubscribe_gate()
        self._tear_down()
        await self.gate.clear()

    async def _run(self) -> None:
        while True:
            identity = await self._queue.get()
            try:
                await self.gate.set_identity(identity)
            except Exception:
                logger.exception("Failed to apply identity change")

    async def _on_identity(self, identity: str | None) -> None:
        if identity is None:
            self._tear_down()
            self._preference = None
            await self._report(None, False)
            return

        self.subscriptions.on_identity_changed(identity)
        await self.refresh_preferences()
        if self.subscriptions.identity != identity:
            # Torn down by a newer submission while preferences were loading.
            return
        self._start_setup(identity)

    def _start_setup(self, identity: str, *, force: bool = False) -> None:
        self._cancel_setup()
        self._setup = asyncio.get_running_loop().create_task(
            self._set_up_notifications(identity, force=force)
        )

    async def _set_up_notifications(self, identity: str, *, force: bool) -> None:
        granted = await self.dispatcher.request_permission(force=force)
        if self.identity != identity:
            return
        self._remove_listeners()
        if granted:
            self._listener_handles = self.dispatcher.sink.listen(
                self._on_received, self.router.on_notification_tapped
            )
        await self._report(identity, granted)

    def _cancel_setup(self) -> None:
        setup, self._setup = self._setup, None
        if setup is not None and not setup.done():
            setup.cancel()

    def _tear_down(self) -> None:
        self._cancel_setup()
        self.subscriptions.on_identity_changed(None)
        self._remove_listeners()

    async def _report(self, identity: str | None, granted: bool) -> None:
        if self._on_state is None:
            return
        result = self._on_state(identity, granted)
        if inspect.isawaitable(result):
            await result

    def _remove_listeners(self) -> None:
        handles, self._listener_handles = self._listener_handles, []
        for handle in handles:
            handle.remove()

    @staticmethod
    def _on_received(notification: Any) -> None:
        logger.info("Notification received: %s", notification)
