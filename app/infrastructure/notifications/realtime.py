"""In-process change feed for the horoscope tables.

Row changes enter through :meth:`ChangeFeedBroker.publish` and are fanned out
to every subscription whose table and owner filter match. Each subscription
owns a :class:`ChangeFeedChannel`, an async iterator backed by an
``asyncio.Queue``, and a single pump task that drains it in order. A handle
therefore never runs two callbacks at the same time.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, DefaultDict, Protocol, Set

from anyio import from_thread

from app.domain.entities import ChangeOperation, ResourceClass

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Any], "Awaitable[None] | None"]

_CLOSED = object()


class ChangeFeedError(RuntimeError):
    """Raised when a change-feed subscription cannot be opened."""


@dataclass(frozen=True)
class ChangeFeedFilter:
    """Server-side filter scoping a subscription to one table and owner."""

    table: str
    owner_id: str
    column: str = "user_id"

    def __str__(self) -> str:
        return f"{self.column}=eq.{self.owner_id}"


class SubscriptionHandle(Protocol):
    """Open subscription returned by a :class:`ChangeFeed`."""

    resource_class: ResourceClass

    def close(self) -> None: ...


class ChangeFeed(Protocol):
    """Port: subscribe to inserts and updates on a horoscope table."""

    def subscribe(
        self,
        resource_class: ResourceClass,
        *,
        owner_id: str,
        on_inserted: ChangeCallback,
        on_updated: ChangeCallback,
    ) -> SubscriptionHandle: ...


class ChangeFeedChannel:
    """Async iterator over the changes queued for one subscription."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, operation: ChangeOperation, payload: Any) -> bool:
        """Queue a change; returns ``False`` once the channel is closed."""

        if self._closed:
            return False
        self._queue.put_nowait((operation, payload))
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued change has been handled or discarded."""

        await self._queue.join()

    def __aiter__(self) -> "ChangeFeedChannel":
        return self

    async def __anext__(self) -> tuple[ChangeOperation, Any]:
        item = await self._queue.get()
        if item is _CLOSED or self._closed:
            self._queue.task_done()
            self._discard_pending()
            raise StopAsyncIteration
        return item

    def _discard_pending(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._queue.task_done()


class BrokerSubscription:
    """Subscription handle issued by :class:`ChangeFeedBroker`."""

    def __init__(
        self,
        broker: "ChangeFeedBroker",
        resource_class: ResourceClass,
        feed_filter: ChangeFeedFilter,
        *,
        on_inserted: ChangeCallback,
        on_updated: ChangeCallback,
    ) -> None:
        self.resource_class = resource_class
        self.filter = feed_filter
        self.channel = ChangeFeedChannel()
        self._broker = broker
        self._callbacks = {
            ChangeOperation.INSERTED: on_inserted,
            ChangeOperation.UPDATED: on_updated,
        }
        self._task: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self.channel.closed

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        self._task = loop.create_task(self._pump())

    def close(self) -> None:
        """Stop delivery; queued changes that were not yet handled are dropped."""

        if self.channel.closed:
            return
        self.channel.close()
        self._broker._detach(self)
        logger.debug("Closed %s subscription (%s)", self.filter.table, self.filter)

    async def _pump(self) -> None:
        async for operation, payload in self.channel:
            try:
                await self._deliver(operation, payload)
            except Exception:
                logger.exception(
                    "Change callback failed for %s (%s)", self.filter.table, operation.value
                )
            finally:
                self.channel.task_done()

    async def _deliver(self, operation: ChangeOperation, payload: Any) -> None:
        callback = self._callbacks.get(operation)
        if callback is None:
            return
        result = callback(payload)
        if inspect.isawaitable(result):
            await result


class ChangeFeedBroker:
    """Route published row changes to the matching subscriptions."""

    def __init__(self) -> None:
        self._subscriptions: DefaultDict[tuple[str, str], Set[BrokerSubscription]] = (
            defaultdict(set)
        )
        self._closed = False

    @property
    def subscription_count(self) -> int:
        return sum(len(handles) for handles in self._subscriptions.values())

    def subscribe(
        self,
        resource_class: ResourceClass,
        *,
        owner_id: str,
        on_inserted: ChangeCallback,
        on_updated: ChangeCallback,
    ) -> BrokerSubscription:
        """Open a subscription for ``resource_class`` rows owned by ``owner_id``."""

        if self._closed:
            raise ChangeFeedError("The change feed has been shut down")
        if not owner_id:
            raise ChangeFeedError("A change-feed subscription requires an owner id")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise ChangeFeedError("Change-feed subscriptions need a running event loop") from exc

        feed_filter = ChangeFeedFilter(table=resource_class.table, owner_id=owner_id)
        handle = BrokerSubscription(
            self,
            resource_class,
            feed_filter,
            on_inserted=on_inserted,
            on_updated=on_updated,
        )
        self._subscriptions[(feed_filter.table, owner_id)].add(handle)
        handle.start(loop)
        logger.debug("Opened %s subscription (%s)", feed_filter.table, feed_filter)
        return handle

    def publish(
        self,
        table: str,
        owner_id: str,
        operation: ChangeOperation,
        payload: Any,
    ) -> int:
        """Fan ``payload`` out to the subscriptions on ``table`` for ``owner_id``.

        Returns the number of subscriptions that accepted the change. Calls made
        from an anyio worker thread are marshalled onto the event loop.
        """

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return from_thread.run_sync(self._fan_out, table, owner_id, operation, payload)
        return self._fan_out(table, owner_id, operation, payload)

    async def join(self) -> None:
        """Wait until every open subscription has drained its queue."""

        for handles in list(self._subscriptions.values()):
            for handle in list(handles):
                await handle.channel.join()

    def close(self) -> None:
        """Close every subscription and reject new ones."""

        self._closed = True
        for handles in list(self._subscriptions.values()):
            for handle in list(handles):
                handle.close()

    def _fan_out(
        self, table: str, owner_id: str, operation: ChangeOperation, payload: Any
    ) -> int:
        delivered = 0
        for handle in list(self._subscriptions.get((table, owner_id), ())):
            if handle.channel.push(operation, payload):
                delivered += 1
        logger.debug(
            "Change on %s (%s) for %s reached %d subscription(s)",
            table,
            operation.value,
            owner_id,
            delivered,
        )
        return delivered

    def _detach(self, handle: BrokerSubscription) -> None:
        key = (handle.filter.table, handle.filter.owner_id)
        handles = self._subscriptions.get(key)
        if handles is None:
            return
        handles.discard(handle)
        if not handles:
            self._subscriptions.pop(key, None)


change_feed_broker = ChangeFeedBroker()


__all__ = [
    "BrokerSubscription",
    "ChangeCallback",
    "ChangeFeed",
    "ChangeFeedBroker",
    "ChangeFeedChannel",
    "ChangeFeedError",
    "ChangeFeedFilter",
    "SubscriptionHandle",
    "change_feed_broker",
]
