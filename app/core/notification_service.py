"""
Notification fan-out.

Notifications are written in their own transaction after the primary record
has been committed. A failure here is logged and rolled back; it never turns
a successful task or meeting operation into an error.
"""

from collections.abc import Iterable
from datetime import datetime

from sqlmodel import Session

from app.core.logging import get_logger
from app.models.notification import Notification, NotificationType

logger = get_logger(__name__)


def notify_users(
    session: Session,
    recipient_ids: Iterable[int],
    notification_type: NotificationType,
    title: str,
    message: str,
    related_id: int,
) -> int:
    """Create one notification per recipient. Returns how many were written."""
    recipients = list(dict.fromkeys(recipient_ids))
    if not recipients:
        return 0

    try:
        now = datetime.utcnow()
        for recipient_id in recipients:
            session.add(
                Notification(
                    recipient_id=recipient_id,
                    type=notification_type,
                    title=title,
                    message=message,
                    related_id=related_id,
                    read=False,
                    created_at=now,
                    updated_at=now,
                )
            )
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(
            f"Failed to create {notification_type.value} notifications "
            f"for {related_id}: {e}",
            exc_info=True,
        )
        return 0

    logger.info(
        f"Created {len(recipients)} {notification_type.value} notification(s) for {related_id}"
    )
    return len(recipients)
