"""
Event definitions for the Workplace Tracker Service.

Defines the event types published to Kafka and their data structures.
Events are categorized into:
- Attendance lifecycle events (check-in, check-out)
- Meeting lifecycle events (scheduled, updated, cancelled)
- Task events (assigned, updated)
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """All event types produced by the Workplace Tracker Service."""

    # Attendance Events
    ATTENDANCE_CHECKIN = "attendance.checkin"
    ATTENDANCE_CHECKOUT = "attendance.checkout"

    # Meeting Events
    MEETING_SCHEDULED = "meeting.scheduled"
    MEETING_UPDATED = "meeting.updated"
    MEETING_CANCELLED = "meeting.cancelled"

    # Task Events
    TASK_ASSIGNED = "task.assigned"
    TASK_UPDATED = "task.updated"


class EventMetadata(BaseModel):
    """Metadata attached to every event for tracing and correlation."""

    source_service: str = "workplace-tracker-service"
    correlation_id: str = Field(default_factory=lambda: str(uuid4()))
    actor_user_id: Optional[str] = None
    actor_role: Optional[str] = None


class EventEnvelope(BaseModel):
    """
    Standard envelope for all events.
    Provides consistent structure for Kafka messages.
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: EventType
    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    version: str = "1.0"
    data: dict[str, Any]
    metadata: EventMetadata = Field(default_factory=EventMetadata)


# Attendance Event Data Models


class AttendanceCheckinEvent(BaseModel):
    """Data for attendance.checkin event."""

    attendance_id: int
    user_id: int
    date: date
    check_in: datetime
    status: str
    department: str


class AttendanceCheckoutEvent(BaseModel):
    """Data for attendance.checkout event."""

    attendance_id: int
    user_id: int
    date: date
    check_in: datetime
    check_out: datetime
    work_hours: float
    is_early_leave: bool
    status: str
    department: str


# Meeting Event Data Models


class MeetingEvent(BaseModel):
    """Data for meeting.scheduled, meeting.updated and meeting.cancelled."""

    meeting_id: int
    title: str
    start_time: datetime
    end_time: datetime
    organizer_id: int
    department: str
    participant_ids: list[int] = []
    added_participant_ids: list[int] = []
    removed_participant_ids: list[int] = []


# Task Event Data Models


class TaskEvent(BaseModel):
    """Data for task.assigned and task.updated."""

    task_id: int
    title: str
    assigned_to: int
    assigned_by: int
    department: str
    status: str
    previous_status: Optional[str] = None


def create_event(
    event_type: EventType,
    data: BaseModel,
    actor_user_id: Optional[str] = None,
    actor_role: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> EventEnvelope:
    """
    Helper function to create an event envelope with proper metadata.

    Args:
        event_type: Type of the event
        data: Event data as a Pydantic model
        actor_user_id: ID of the user performing the action
        actor_role: Role of the user performing the action
        correlation_id: Optional correlation ID for tracing

    Returns:
        EventEnvelope ready for publishing
    """
    metadata = EventMetadata(
        actor_user_id=actor_user_id,
        actor_role=actor_role,
        correlation_id=correlation_id or str(uuid4()),
    )

    return EventEnvelope(
        event_type=event_type,
        data=data.model_dump(mode="json"),
        metadata=metadata,
    )
