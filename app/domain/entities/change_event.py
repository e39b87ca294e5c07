"""Row-level change delivered by the backend change feed."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .resource_class import ResourceClass


class ChangeOperation(str, Enum):
    """Kind of row change reported by the backend."""

    INSERTED = "inserted"
    UPDATED = "updated"
    DELETED = "deleted"

    @classmethod
    def from_webhook_type(cls, value: str) -> "ChangeOperation | None":
        """Translate ``INSERT``/``UPDATE``/``DELETE`` webhook types."""

        return _WEBHOOK_TYPES.get(value.upper())


_WEBHOOK_TYPES = {
    "INSERT": ChangeOperation.INSERTED,
    "UPDATE": ChangeOperation.UPDATED,
    "DELETE": ChangeOperation.DELETED,
}


@dataclass(frozen=True)
class ChangeEvent:
    """A single change on a watched horoscope table."""

    resource_class: ResourceClass
    operation: ChangeOperation
    payload: Any


__all__ = ["ChangeEvent", "ChangeOperation"]
