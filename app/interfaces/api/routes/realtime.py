"""Ingest endpoint feeding row changes into the change-feed broker."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from app.domain.entities import ChangeOperation, ResourceClass
from app.infrastructure.notifications import change_feed_broker
from app.interfaces.api.dependencies import verify_webhook_secret
from app.interfaces.api.schemas import ChangeWebhookPayload, ChangeWebhookResponse

router = APIRouter(prefix="/realtime", tags=["realtime"])

logger = logging.getLogger(__name__)


@router.post(
    "/changes",
    response_model=ChangeWebhookResponse,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(verify_webhook_secret)],
)
def ingest_change(payload: ChangeWebhookPayload) -> ChangeWebhookResponse:
    """Publish a horoscope row change to the subscriptions of its owner."""

    resource_class = ResourceClass.from_table(payload.table)
    if resource_class is None:
        logger.debug("Ignoring change on unwatched table %s", payload.table)
        return ChangeWebhookResponse(delivered=0)

    owner_id = payload.owner_id()
    if owner_id is None:
        logger.warning("Change on %s carries no user_id; ignoring", payload.table)
        return ChangeWebhookResponse(delivered=0)

    operation = ChangeOperation.from_webhook_type(payload.type)
    delivered = change_feed_broker.publish(
        resource_class.table, owner_id, operation, payload.row()
    )
    return ChangeWebhookResponse(delivered=delivered)
