"""Observable holder of the authenticated identity."""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

IdentityListener = Callable[[str | None], "Awaitable[None] | None"]


class SessionGate:
    """Track the current identity and announce each change as discrete events.

    Listeners receive the new identity when one becomes present and ``None``
    when the previous one becomes absent. Switching directly between two
    identities always announces the absence of the old one first.
    """

    def __init__(self) -> None:
        self._identity: str | None = None
        self._listeners: list[IdentityListener] = []

    @property
    def identity(self) -> str | None:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set_identity(self, identity: str | None) -> None:
        identity = identity or None
        if identity == self._identity:
            return
        if self._identity is not None:
            logger.info("Identity %s became absent", self._identity)
            self._identity = None
            await self._emit(None)
        if identity is not None:
            logger.info("Identity %s became present", identity)
            self._identity = identity
            await self._emit(identity)

    async def clear(self) -> None:
        await self.set_identity(None)

    async def _emit(self, identity: str | None) -> None:
        for listener in list(self._listeners):
            result = listener(identity)
            if inspect.isawaitable(result):
                await result
