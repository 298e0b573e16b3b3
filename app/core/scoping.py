"""
Role-based scoping rules.

Each function turns the filters a client asked for into the filters the
caller is allowed to use. The result is applied to the query unconditionally,
so a client cannot widen its view by sending other filter values.
"""

from dataclasses import dataclass
from typing import Optional

from app.models.user import Role

# Roles allowed to schedule meetings and assign tasks
ELEVATED_ROLES: tuple[Role, ...] = (Role.CEO, Role.DIRECTOR)

# Role that may act on any meeting or task regardless of ownership
TOP_ROLE = Role.CEO

DIAGNOSTICS_ROLES: tuple[Role, ...] = (Role.ADMIN, Role.CEO)


@dataclass(frozen=True)
class Caller:
    user_id: int
    role: Role
    department: Optional[str] = None


@dataclass(frozen=True)
class AttendanceScope:
    user_id: Optional[int] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class MeetingScope:
    # Restrict to meetings this user organizes or attends
    member_id: Optional[int] = None
    department: Optional[str] = None
    organizer_id: Optional[int] = None


@dataclass(frozen=True)
class TaskScope:
    assigned_to: Optional[int] = None
    department: Optional[str] = None


def is_top_role(role: Role) -> bool:
    return role == TOP_ROLE


def scope_attendance(
    caller: Caller,
    user_id: Optional[int] = None,
    department: Optional[str] = None,
) -> AttendanceScope:
    if caller.role == Role.EMPLOYEE:
        return AttendanceScope(user_id=caller.user_id, department=department)
    if caller.role == Role.DIRECTOR:
        return AttendanceScope(user_id=user_id, department=caller.department)
    return AttendanceScope(user_id=user_id, department=department)


def scope_meetings(
    caller: Caller,
    department: Optional[str] = None,
    organizer_id: Optional[int] = None,
) -> MeetingScope:
    if caller.role == Role.EMPLOYEE:
        return MeetingScope(
            member_id=caller.user_id, department=department, organizer_id=organizer_id
        )
    if caller.role == Role.DIRECTOR:
        return MeetingScope(department=caller.department, organizer_id=organizer_id)
    return MeetingScope(department=department, organizer_id=organizer_id)


def scope_tasks(
    caller: Caller,
    assigned_to: Optional[int] = None,
    department: Optional[str] = None,
) -> TaskScope:
    if caller.role == Role.EMPLOYEE:
        return TaskScope(assigned_to=caller.user_id, department=department)
    if caller.role == Role.DIRECTOR:
        return TaskScope(assigned_to=assigned_to, department=caller.department)
    return TaskScope(assigned_to=assigned_to, department=department)


def can_manage(caller: Caller, owner_ids: set[int]) -> bool:
    """True if the caller owns the resource or holds the top role."""
    return is_top_role(caller.role) or caller.user_id in owner_ids
