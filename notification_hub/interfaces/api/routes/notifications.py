"""Endpoints and websocket change feed for user notifications."""

from __future__ import annotations

import logging

import anyio
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from notification_hub.application.ports import FEED_SUBSCRIBED
from notification_hub.application.use_cases.notifications.queries import (
    get_notification_history,
    list_recent_notifications,
    mark_all_notifications_as_read,
    mark_notification_as_read,
)
from notification_hub.config import get_settings
from notification_hub.domain.entities import Notification
from notification_hub.infrastructure.database import SessionLocal, get_db
from notification_hub.infrastructure.notifications import notification_feed
from notification_hub.interfaces.api.dependencies import get_current_user_id, resolve_user_id
from notification_hub.interfaces.api.schemas import (
    NotificationHistoryRead,
    NotificationMarkAllReadResponse,
    NotificationRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    limit: int | None = Query(default=None, ge=1),
    include_all: bool = Query(default=False, alias="all"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> list[NotificationRead]:
    """Return the most recent notifications, or the full log with ``all=true``."""

    if include_all:
        effective_limit = None
    else:
        effective_limit = limit or get_settings().initial_notification_limit
    notifications = list_recent_notifications(db, user_id, limit=effective_limit)
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/history", response_model=NotificationHistoryRead)
def read_notification_history(
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=200),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationHistoryRead:
    """Return one page of the notification log, newest first."""

    history = get_notification_history(
        db,
        user_id,
        page=page,
        page_size=page_size or get_settings().history_page_size,
    )
    return NotificationHistoryRead(
        items=[_notification_to_schema(item) for item in history.items],
        total=history.total,
        page=history.page,
        page_size=history.page_size,
    )


@router.post("/read-all", response_model=NotificationMarkAllReadResponse)
def mark_all_as_read(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationMarkAllReadResponse:
    """Mark every unread visible notification of the user as read."""

    updated = mark_all_notifications_as_read(db, user_id)
    return NotificationMarkAllReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_as_read(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationRead:
    """Mark ``notification_id`` as read."""

    try:
        notification = mark_notification_as_read(db, user_id, notification_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _notification_to_schema(notification)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Stream inserted notification rows to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    try:
        user_id = resolve_user_id(token)
    except HTTPException:
        await websocket.close(code=1008)
        return

    await notification_feed.connect(user_id, websocket)
    try:
        await websocket.send_json({"type": "status", "status": FEED_SUBSCRIBED})
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    await anyio.to_thread.run_sync(
                        _acknowledge, user_id, [str(value) for value in ids]
                    )
                continue
    except WebSocketDisconnect:
        notification_feed.disconnect(user_id, websocket)
    except Exception:
        notification_feed.disconnect(user_id, websocket)
        raise


def _acknowledge(user_id: str, notification_ids: list[str]) -> None:
    with SessionLocal() as session:
        for notification_id in notification_ids:
            try:
                mark_notification_as_read(session, user_id, notification_id)
            except ValueError:
                logger.info("Ignoring ack for unknown notification %s", notification_id)
