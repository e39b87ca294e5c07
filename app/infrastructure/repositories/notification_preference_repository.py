"""Persistence helpers for notification preference entities."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import NotificationPreference
from app.infrastructure.models import NotificationPreferenceModel
from app.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone


class NotificationPreferenceRepository:
    """Provide read and upsert operations for :class:`NotificationPreference`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> NotificationPreference | None:
        model = self.session.get(NotificationPreferenceModel, user_id)
        if model is None:
            return None
        return self._to_entity(model)

    def save(self, preference: NotificationPreference) -> NotificationPreference:
        model = self.session.get(NotificationPreferenceModel, preference.user_id)
        if model is None:
            model = NotificationPreferenceModel(user_id=preference.user_id)
        model.enabled = preference.enabled
        model.daily = preference.daily
        model.weekly = preference.weekly
        model.monthly = preference.monthly
        model.updated_at = ensure_app_naive_datetime(
            preference.updated_at or now_in_app_timezone()
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreference:
        return NotificationPreference(
            user_id=model.user_id,
            enabled=model.enabled,
            daily=model.daily,
            weekly=model.weekly,
            monthly=model.monthly,
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationPreferenceRepository"]
