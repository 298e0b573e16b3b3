"""
Notification model and schemas.

Notifications are written as side effects of task and meeting changes. The
read flag is the only field a user can change.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class NotificationType(str, Enum):
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_UPDATED = "TASK_UPDATED"
    MEETING_SCHEDULED = "MEETING_SCHEDULED"
    MEETING_UPDATED = "MEETING_UPDATED"
    TASK_DUE_SOON = "TASK_DUE_SOON"
    MEETING_REMINDER = "MEETING_REMINDER"
    MEETING_CANCELLED = "MEETING_CANCELLED"
    ATTENDANCE_REMINDER = "ATTENDANCE_REMINDER"


class Notification(SQLModel, table=True):
    """ORM model for the notifications table."""

    __tablename__ = "notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    recipient_id: int = Field(foreign_key="users.id", index=True, nullable=False)
    type: NotificationType = Field(nullable=False)
    title: str = Field(max_length=255, nullable=False)
    message: str = Field(max_length=1000, nullable=False)
    # Id of the task or meeting that triggered the notification
    related_id: int = Field(nullable=False)
    read: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)


class NotificationPublic(SQLModel):
    id: int
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    related_id: int
    read: bool
    created_at: datetime
    updated_at: datetime
