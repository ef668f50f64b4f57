"""Endpoints for push subscription registration and server-side dispatch."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from notification_hub.application.use_cases.push_subscriptions import (
    deactivate_push_subscription,
    register_push_subscription,
    send_push_notification,
)
from notification_hub.domain.entities import PushSubscription
from notification_hub.infrastructure.database import get_db
from notification_hub.infrastructure.notifications.push_backend import PushDispatcher
from notification_hub.interfaces.api.dependencies import (
    get_current_user_id,
    get_push_dispatcher,
)
from notification_hub.interfaces.api.schemas import (
    PushSendRequest,
    PushSendResponse,
    PushSubscriptionCreate,
    PushSubscriptionDeactivate,
    PushSubscriptionRead,
)

router = APIRouter(prefix="/push", tags=["push"])


@router.post(
    "/subscriptions",
    response_model=PushSubscriptionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_push_subscription(
    payload: PushSubscriptionCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> PushSubscriptionRead:
    """Register the calling device's push subscription."""

    subscription = PushSubscription(
        endpoint=payload.endpoint,
        keys=payload.keys.model_dump(),
        user_agent=payload.user_agent,
    )
    saved = register_push_subscription(db, user_id, subscription)
    return PushSubscriptionRead.model_validate(saved)


@router.post("/subscriptions/deactivate", response_model=PushSubscriptionRead)
def deactivate_subscription(
    payload: PushSubscriptionDeactivate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> PushSubscriptionRead:
    """Mark the subscription for ``payload.endpoint`` inactive."""

    try:
        subscription = deactivate_push_subscription(db, user_id, payload.endpoint)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return PushSubscriptionRead.model_validate(subscription)


@router.post("/send", response_model=PushSendResponse)
def send_push(
    payload: PushSendRequest,
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_id),
    dispatcher: PushDispatcher = Depends(get_push_dispatcher),
) -> PushSendResponse:
    """Push ``payload.payload`` to every active device of ``payload.user_id``."""

    delivered = send_push_notification(db, dispatcher, payload.user_id, payload.payload)
    return PushSendResponse(delivered=delivered)
