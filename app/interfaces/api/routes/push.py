"""Ruta para enviar notificaciones push a un grupo de usuarios."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.application.use_cases.push_notifications import (
    build_send_request,
    send_push_notifications,
)
from app.domain.exceptions import GatewayError, ValidationError
from app.infrastructure.database import get_db
from app.infrastructure.push import ExpoPushClient, ReceiptCheckScheduler
from app.interfaces.api.dependencies import (
    get_push_gateway,
    get_receipt_scheduler,
    require_shared_secret,
)
from app.interfaces.api.schemas import SendPushRequestBody, SendPushResponse

router = APIRouter(tags=["push"], dependencies=[Depends(require_shared_secret)])
logger = logging.getLogger(__name__)

SEND_FAILED_MESSAGE = "Failed to send notifications"


@router.post("/send-push", response_model=SendPushResponse)
def send_push(
    payload: SendPushRequestBody,
    db: Session = Depends(get_db),
    gateway: ExpoPushClient = Depends(get_push_gateway),
    scheduler: ReceiptCheckScheduler = Depends(get_receipt_scheduler),
) -> SendPushResponse:
    """Registra y envía las notificaciones; los recibos se revisan más tarde."""

    try:
        request = build_send_request(
            user_ids=payload.user_ids,
            sender_user_id=payload.sender_user_id,
            title=payload.title,
            body=payload.body,
            data=payload.data,
            tournament_id=payload.tournament_id,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    try:
        result = send_push_notifications(db, request, gateway=gateway, scheduler=scheduler)
    except GatewayError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=SEND_FAILED_MESSAGE,
        ) from exc
    except Exception as exc:
        logger.exception("Unexpected error while sending push notifications")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=SEND_FAILED_MESSAGE,
        ) from exc

    logger.info(
        "Dispatch finished: %s recipients, %s submitted, %s failed, %s skipped",
        result.recipients,
        result.submitted,
        result.failed,
        result.skipped,
    )
    return SendPushResponse()
