"""
Tests for the role-based scoping rules.
"""

import pytest

from app.core.scoping import (
    AttendanceScope,
    Caller,
    MeetingScope,
    TaskScope,
    can_manage,
    scope_attendance,
    scope_meetings,
    scope_tasks,
)
from app.models.user import Role

EMPLOYEE = Caller(user_id=7, role=Role.EMPLOYEE, department="Engineering")
DIRECTOR = Caller(user_id=3, role=Role.DIRECTOR, department="Engineering")
CEO = Caller(user_id=1, role=Role.CEO, department="Executive")
ADMIN = Caller(user_id=2, role=Role.ADMIN, department="IT")


def test_employee_attendance_is_pinned_to_self():
    scope = scope_attendance(EMPLOYEE, user_id=99, department="Sales")

    assert scope == AttendanceScope(user_id=7, department="Sales")


def test_director_attendance_is_pinned_to_department():
    scope = scope_attendance(DIRECTOR, user_id=99, department="Sales")

    assert scope == AttendanceScope(user_id=99, department="Engineering")


@pytest.mark.parametrize("caller", [CEO, ADMIN])
def test_top_roles_use_requested_attendance_filters(caller):
    assert scope_attendance(caller, user_id=5) == AttendanceScope(user_id=5)
    assert scope_attendance(caller) == AttendanceScope()


def test_meeting_scopes():
    assert scope_meetings(EMPLOYEE, department="Sales") == MeetingScope(
        member_id=7, department="Sales"
    )
    assert scope_meetings(DIRECTOR, department="Sales", organizer_id=4) == MeetingScope(
        department="Engineering", organizer_id=4
    )
    assert scope_meetings(CEO, organizer_id=4) == MeetingScope(organizer_id=4)


def test_task_scopes():
    assert scope_tasks(EMPLOYEE, assigned_to=99) == TaskScope(assigned_to=7)
    assert scope_tasks(DIRECTOR, department="Sales") == TaskScope(department="Engineering")
    assert scope_tasks(ADMIN, assigned_to=5, department="Sales") == TaskScope(
        assigned_to=5, department="Sales"
    )


def test_can_manage():
    assert can_manage(DIRECTOR, {3})
    assert not can_manage(DIRECTOR, {4})
    assert can_manage(CEO, {4})
    assert not can_manage(ADMIN, {4})
