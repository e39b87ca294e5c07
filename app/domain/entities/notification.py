"""Notification values produced and consumed by the realtime relay."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .resource_class import ResourceClass


@dataclass(frozen=True)
class NotificationIntent:
    """Ready-to-deliver notification built from one change event."""

    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationInteraction:
    """Structured data extracted from a tapped notification."""

    resource_class: ResourceClass | str
    payload: Any


class PermissionState(str, Enum):
    """Notification permission as reported by the device."""

    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"

    @classmethod
    def parse(cls, value: Any) -> "PermissionState":
        """Normalize device permission strings such as ``undetermined``."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def resolved(self) -> bool:
        return self is not PermissionState.UNKNOWN


__all__ = ["NotificationIntent", "NotificationInteraction", "PermissionState"]
