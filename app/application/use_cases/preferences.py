"""Use cases for reading and updating notification preferences."""

from __future__ import annotations

from dataclasses import replace

from anyio import to_thread
from sqlalchemy.orm import Session

from app.domain.entities import NotificationPreference
from app.infrastructure.database import SessionLocal
from app.infrastructure.repositories import NotificationPreferenceRepository
from app.utils import now_in_app_timezone

_PREFERENCE_FIELDS = ("enabled", "daily", "weekly", "monthly")


def get_notification_preferences(session: Session, user_id: str) -> NotificationPreference:
    """Return the stored preferences, or the all-enabled defaults."""

    stored = NotificationPreferenceRepository(session).get(user_id)
    if stored is None:
        return NotificationPreference(user_id=user_id)
    return stored


def update_notification_preferences(
    session: Session, user_id: str, **changes: bool | None
) -> NotificationPreference:
    """Apply the provided switches and persist the result.

    Switches passed as ``None`` keep their current value.
    """

    unknown = set(changes) - set(_PREFERENCE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown preference fields: {', '.join(sorted(unknown))}")

    current = get_notification_preferences(session, user_id)
    updates = {name: value for name, value in changes.items() if value is not None}
    updated = replace(current, **updates, updated_at=now_in_app_timezone())
    return NotificationPreferenceRepository(session).save(updated)


def _load_in_thread(user_id: str) -> NotificationPreference:
    with SessionLocal() as session:
        return get_notification_preferences(session, user_id)


async def load_notification_preferences(user_id: str) -> NotificationPreference:
    """Load preferences without blocking the event loop."""

    return await to_thread.run_sync(_load_in_thread, user_id)


__all__ = [
    "get_notification_preferences",
    "load_notification_preferences",
    "update_notification_preferences",
]
