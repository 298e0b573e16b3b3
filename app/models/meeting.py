"""
Meeting database models and schemas.

A meeting has an organizer and a non-empty set of participants stored in the
meeting_participants link table. Only SCHEDULED is ever persisted; the
in-progress and completed states are derived from the clock when read.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator
from sqlmodel import Field, Relationship, SQLModel

from app.core.clock import as_local_naive
from app.models.user import User, UserSummary


class MeetingStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# Database Models


class MeetingParticipant(SQLModel, table=True):
    """Link table between meetings and the users invited to them."""

    __tablename__ = "meeting_participants"

    meeting_id: Optional[int] = Field(
        default=None, foreign_key="meetings.id", primary_key=True
    )
    user_id: Optional[int] = Field(
        default=None, foreign_key="users.id", primary_key=True
    )


class Meeting(SQLModel, table=True):
    """ORM model for the meetings table."""

    __tablename__ = "meetings"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255, nullable=False)
    description: str = Field(max_length=2000, nullable=False)
    location: str = Field(max_length=255, nullable=False)

    start_time: datetime = Field(index=True, nullable=False)
    end_time: datetime = Field(index=True, nullable=False)

    status: str = Field(default=MeetingStatus.SCHEDULED.value, max_length=20)
    organizer_id: int = Field(foreign_key="users.id", index=True, nullable=False)
    department: str = Field(default="General", index=True, max_length=255)

    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    organizer: Optional[User] = Relationship()
    participants: list[User] = Relationship(link_model=MeetingParticipant)


# Request Schemas


class MeetingCreate(SQLModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=2000)
    location: str = Field(min_length=1, max_length=255)
    start_time: datetime
    end_time: datetime
    participants: list[int] = []
    department: Optional[str] = Field(default=None, max_length=255)

    @field_validator("start_time", "end_time")
    @classmethod
    def to_local_naive(cls, value: datetime) -> datetime:
        return as_local_naive(value)


class MeetingUpdate(SQLModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    location: Optional[str] = Field(default=None, min_length=1, max_length=255)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    participants: Optional[list[int]] = None
    department: Optional[str] = Field(default=None, max_length=255)

    @field_validator("start_time", "end_time")
    @classmethod
    def to_local_naive(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_local_naive(value)


# Response Schemas


class MeetingPublic(BaseModel):
    id: int
    title: str
    description: str
    location: str
    start_time: datetime
    end_time: datetime
    status: MeetingStatus
    current_status: MeetingStatus
    department: str
    organizer: Optional[UserSummary] = None
    participants: list[UserSummary] = []
    created_at: datetime
    updated_at: datetime


class MeetingConflict(BaseModel):
    """One existing meeting that clashes with a proposed time window."""

    meeting_id: int
    title: str
    start_time: datetime
    end_time: datetime
    conflicting_participants: list[str] = []
    organizer_conflict: bool = False
