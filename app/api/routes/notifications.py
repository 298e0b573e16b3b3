from datetime import datetime

from fastapi import APIRouter
from sqlalchemy import update
from sqlmodel import col, select

from app.api.dependencies import CurrentUserDep, SessionDep
from app.core.exceptions import NotAuthorized, NotFoundError
from app.core.logging import get_logger
from app.models.notification import Notification, NotificationPublic

logger = get_logger(__name__)

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
    responses={404: {"description": "Notification not found"}},
)

NOTIFICATION_LIST_LIMIT = 50


@router.get("", response_model=list[NotificationPublic])
async def list_notifications(
    session: SessionDep,
    current_user: CurrentUserDep,
) -> list[Notification]:
    """
    Get the caller's most recent notifications, newest first.
    """
    statement = (
        select(Notification)
        .where(Notification.recipient_id == current_user.user_id)
        .order_by(col(Notification.created_at).desc(), col(Notification.id).desc())
        .limit(NOTIFICATION_LIST_LIMIT)
    )
    notifications = session.exec(statement).all()
    logger.info(f"Found {len(notifications)} notifications for user {current_user.sub}")
    return notifications


@router.patch("/mark-all-read")
async def mark_all_read(
    session: SessionDep,
    current_user: CurrentUserDep,
) -> dict[str, str]:
    """
    Mark every unread notification of the caller as read.
    """
    statement = (
        update(Notification)
        .where(
            col(Notification.recipient_id) == current_user.user_id,
            col(Notification.read).is_(False),
        )
        .values(read=True, updated_at=datetime.utcnow())
    )
    result = session.connection().execute(statement)
    session.commit()
    logger.info(f"Marked {result.rowcount} notifications read for user {current_user.sub}")
    return {"message": "All notifications marked as read"}


@router.patch("/{notification_id}/read", response_model=NotificationPublic)
async def mark_read(
    notification_id: int,
    session: SessionDep,
    current_user: CurrentUserDep,
) -> Notification:
    """
    Mark a single notification as read.

    Raises:
        NotFoundError: 404 if the notification does not exist
        NotAuthorized: 403 if the caller is not its recipient
    """
    notification = session.get(Notification, notification_id)
    if not notification:
        raise NotFoundError("Notification not found")
    if notification.recipient_id != current_user.user_id:
        logger.warning(
            f"User {current_user.sub} attempted to read notification {notification_id}"
        )
        raise NotAuthorized()

    notification.read = True
    notification.updated_at = datetime.utcnow()
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return notification
