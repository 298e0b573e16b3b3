"""
Attendance database models and schemas for the Workplace Tracker Service.

One record per user per calendar day:
- Created at check-in with a provisional status (present or late)
- Completed once at check-out (work hours, early leave flag, derived status)
- Never deleted
"""

from datetime import date, datetime
from datetime import date as date_type
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from app.models.user import UserSummary


class AttendanceStatus(str, Enum):
    """Status of attendance record."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    ABSENT = "ABSENT"


# Database Model


class Attendance(SQLModel, table=True):
    """
    ORM model for Attendance table.

    The unique constraint on (user_id, date) is the only guard against two
    concurrent check-ins for the same day.
    """

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", index=True, nullable=False)
    date: date_type = Field(index=True, nullable=False)

    check_in: datetime = Field(nullable=False)
    check_out: Optional[datetime] = Field(default=None, nullable=True)

    status: str = Field(default=AttendanceStatus.PRESENT.value, max_length=20)
    work_hours: float = Field(default=0.0)
    is_early_leave: bool = Field(default=False)

    # Copied from the user at check-in time, not a live reference
    department: str = Field(index=True, max_length=255, nullable=False)

    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)


# Response Schemas


class AttendancePublic(SQLModel):
    """Schema for attendance responses."""

    id: int
    user_id: int
    date: date
    check_in: datetime
    check_out: Optional[datetime] = None
    status: AttendanceStatus
    work_hours: float = 0.0
    is_early_leave: bool = False
    department: str
    created_at: datetime
    updated_at: datetime


class AttendanceWithUser(AttendancePublic):
    """Attendance record with the owning user's profile attached."""

    user: Optional[UserSummary] = None


class AttendanceActionResponse(BaseModel):
    """Response for check-in and check-out."""

    message: str
    attendance: AttendancePublic


# Summary Schemas


class AttendanceByDate(BaseModel):
    date: date
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None


class AttendanceStats(BaseModel):
    """
    Aggregate attendance statistics over a date window.

    attendance_percentage divides present days by calendar days in the window,
    not by the number of records, so it can exceed 100.
    """

    total_days: int
    present_days: int = 0
    late_days: int = 0
    absent_days: int = 0
    attendance_percentage: float = 0.0
    attendance_by_date: list[AttendanceByDate] = []


class DepartmentAttendance(BaseModel):
    """Per-department attendance for the current month."""

    department: str
    present: int
    total: int
    present_today: int
    average_attendance: float


class AttendanceDiagnostics(BaseModel):
    diagnostic_info: dict[str, Any]
    attendance_counts: dict[str, int]
    recent_errors: list[dict[str, Any]]
    sample_records: dict[str, list[AttendancePublic]]
    user_info: dict[str, Any]
