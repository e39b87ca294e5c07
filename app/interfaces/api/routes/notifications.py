"""Endpoints and websocket handler for horoscope notifications."""

from __future__ import annotations

import json
import logging

from anyio import from_thread
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from app.application.use_cases import (
    get_notification_preferences,
    load_notification_preferences,
    update_notification_preferences,
)
from app.application.use_cases.notifications import NotificationRelay
from app.config import get_settings
from app.domain.entities import NotificationPreference, PermissionState
from app.infrastructure.database import get_db
from app.infrastructure.notifications import (
    DeviceNotificationFacility,
    change_feed_broker,
    relay_manager,
    select_sink,
)
from app.infrastructure.security import resolve_identity
from app.interfaces.api.dependencies import get_current_identity
from app.interfaces.api.schemas import NotificationPreferenceRead, NotificationPreferenceUpdate

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)


def _preference_to_schema(preference: NotificationPreference) -> NotificationPreferenceRead:
    return NotificationPreferenceRead(
        user_id=preference.user_id,
        enabled=preference.enabled,
        daily=preference.daily,
        weekly=preference.weekly,
        monthly=preference.monthly,
        updated_at=preference.updated_at,
    )


@router.get("/preferences", response_model=NotificationPreferenceRead)
def read_preferences(
    db: Session = Depends(get_db),
    identity: str = Depends(get_current_identity),
) -> NotificationPreferenceRead:
    """Return the horoscope notification switches of the authenticated user."""

    return _preference_to_schema(get_notification_preferences(db, identity))


@router.put("/preferences", response_model=NotificationPreferenceRead)
def update_preferences(
    payload: NotificationPreferenceUpdate,
    db: Session = Depends(get_db),
    identity: str = Depends(get_current_identity),
) -> NotificationPreferenceRead:
    """Update the switches and refresh the user's connected devices."""

    try:
        preference = update_notification_preferences(
            db, identity, **payload.model_dump(exclude_unset=True)
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    from_thread.run(relay_manager.refresh_preferences, identity)
    return _preference_to_schema(preference)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Run one notification relay for the connected device.

    Query parameters: ``platform`` (``ios``, ``android`` or ``web``),
    ``permission`` (the device's current notification permission) and an
    optional ``token`` holding a Supabase access token. Besides the facility
    messages, the device may send ``session``, ``signed-out``,
    ``request-permission`` and ``ping``.
    """

    settings = get_settings()
    await websocket.accept()

    facility = DeviceNotificationFacility(
        websocket,
        permission=PermissionState.parse(websocket.query_params.get("permission")),
        permission_timeout=settings.permission_request_timeout_seconds,
    )
    sink = select_sink(websocket.query_params.get("platform"), facility)

    async def report_state(identity: str | None, granted: bool) -> None:
        await websocket.send_json(
            {
                "type": "session",
                "data": {"user_id": identity, "notifications_granted": granted},
            }
        )

    relay = NotificationRelay(
        change_feed_broker,
        sink,
        preferences=load_notification_preferences,
        on_state=report_state,
    )
    relay_manager.connect(relay)

    async def submit_token(token: object) -> None:
        try:
            identity = resolve_identity(str(token or ""))
        except ValueError as exc:
            logger.warning("Rejected device session: %s", exc)
            await websocket.send_json({"type": "error", "detail": "invalid-session"})
            relay.submit_identity(None)
            return
        relay.submit_identity(identity)

    try:
        token = websocket.query_params.get("token")
        if token:
            await submit_token(token)

        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except ValueError:
                continue
            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if await facility.handle_message(message):
                if (
                    message_type == "permissions"
                    and relay.dispatcher.permission is PermissionState.DENIED
                    and await facility.get_permissions() is PermissionState.GRANTED
                ):
                    relay.renew_permission()
                continue

            if message_type == "request-permission":
                relay.renew_permission()
            elif message_type == "ping":
                await websocket.send_json({"type": "pong"})
            elif message_type == "session":
                await submit_token(message.get("access_token"))
            elif message_type == "signed-out":
                relay.submit_identity(None)
    except WebSocketDisconnect:
        pass
    finally:
        await relay_manager.disconnect(relay)
