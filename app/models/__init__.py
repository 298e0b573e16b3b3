"""
Database models and schemas module.
Contains all SQLModel table definitions and Pydantic schemas.
"""

from app.models.attendance import (
    Attendance,
    AttendanceActionResponse,
    AttendancePublic,
    AttendanceStats,
    AttendanceStatus,
    AttendanceWithUser,
    DepartmentAttendance,
)
from app.models.department import (
    Department,
    DepartmentCreate,
    DepartmentPublic,
    DepartmentUpdate,
)
from app.models.meeting import (
    Meeting,
    MeetingConflict,
    MeetingCreate,
    MeetingParticipant,
    MeetingPublic,
    MeetingStatus,
    MeetingUpdate,
)
from app.models.notification import (
    Notification,
    NotificationPublic,
    NotificationType,
)
from app.models.task import (
    Task,
    TaskCreate,
    TaskPriority,
    TaskPublic,
    TaskStatus,
    TaskUpdate,
)
from app.models.user import (
    Role,
    User,
    UserCreate,
    UserPublic,
    UserSummary,
    UserUpdate,
)

__all__ = [
    "Role",
    "User",
    "UserCreate",
    "UserUpdate",
    "UserPublic",
    "UserSummary",
    "Department",
    "DepartmentCreate",
    "DepartmentUpdate",
    "DepartmentPublic",
    "Attendance",
    "AttendanceStatus",
    "AttendancePublic",
    "AttendanceWithUser",
    "AttendanceActionResponse",
    "AttendanceStats",
    "DepartmentAttendance",
    "Meeting",
    "MeetingParticipant",
    "MeetingStatus",
    "MeetingCreate",
    "MeetingUpdate",
    "MeetingPublic",
    "MeetingConflict",
    "Notification",
    "NotificationType",
    "NotificationPublic",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "TaskCreate",
    "TaskUpdate",
    "TaskPublic",
]
