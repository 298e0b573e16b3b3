from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import (
    CallerDep,
    CurrentUserDep,
    DiagnosticsDep,
    NowDep,
    SessionDep,
)
from app.core.attendance_service import attendance_service
from app.core.clock import as_local_naive
from app.core.config import settings
from app.core.database import check_connection
from app.core.events import (
    AttendanceCheckinEvent,
    AttendanceCheckoutEvent,
    EventType,
)
from app.core.kafka import publish_domain_event
from app.core.logging import get_logger
from app.core.scoping import DIAGNOSTICS_ROLES, scope_attendance
from app.core.security import TokenData, require_role
from app.models.attendance import (
    Attendance,
    AttendanceActionResponse,
    AttendanceDiagnostics,
    AttendancePublic,
    AttendanceStats,
    AttendanceWithUser,
    DepartmentAttendance,
)
from app.models.user import Role, User, UserSummary

logger = get_logger(__name__)

# Create router with prefix and tags for better organization
router = APIRouter(
    prefix="/attendance",
    tags=["attendance"],
    responses={404: {"description": "Attendance record not found"}},
)


@router.post("/check-in", response_model=AttendanceActionResponse, status_code=201)
async def check_in(
    session: SessionDep,
    caller: CallerDep,
    current_user: CurrentUserDep,
    now: NowDep,
) -> AttendanceActionResponse:
    """
    Check-in endpoint.
    Records the caller's check-in time for the current date.

    Args:
        session: Database session (injected)
        caller: Authenticated caller with resolved department
        current_user: Current authenticated user
        now: Server time (injected)

    Returns:
        The created attendance record, LATE when checked in after work start

    Raises:
        AlreadyCheckedIn: 400 if a record without check-out exists for today
        AlreadyCompletedToday: 400 if today's record is already checked out
    """
    logger.info(f"Check-in initiated by user {caller.user_id} ({caller.department})")

    record = attendance_service.check_in(
        session, caller.user_id, caller.department, now
    )

    try:
        await publish_domain_event(
            EventType.ATTENDANCE_CHECKIN,
            AttendanceCheckinEvent(
                attendance_id=record.id,
                user_id=record.user_id,
                date=record.date,
                check_in=record.check_in,
                status=record.status,
                department=record.department,
            ),
            actor_user_id=current_user.sub,
            actor_role=current_user.role.value,
            key=str(record.user_id),
        )
    except Exception as e:
        logger.warning(f"Failed to publish check-in event: {e}")

    return AttendanceActionResponse(
        message="Check-in successful",
        attendance=AttendancePublic.model_validate(record),
    )


@router.post("/check-out", response_model=AttendanceActionResponse)
async def check_out(
    session: SessionDep,
    current_user: CurrentUserDep,
    now: NowDep,
) -> AttendanceActionResponse:
    """
    Check-out endpoint.
    Completes today's attendance record and derives its final status.

    Args:
        session: Database session (injected)
        current_user: Current authenticated user
        now: Server time (injected)

    Returns:
        The completed attendance record with work hours and early leave flag

    Raises:
        NoCheckInFound: 400 if there is no record for today
        AlreadyCheckedOut: 400 if today's record already has a check-out
    """
    logger.info(f"Check-out initiated by user {current_user.sub}")

    record = attendance_service.check_out(session, current_user.user_id, now)

    try:
        await publish_domain_event(
            EventType.ATTENDANCE_CHECKOUT,
            AttendanceCheckoutEvent(
                attendance_id=record.id,
                user_id=record.user_id,
                date=record.date,
                check_in=record.check_in,
                check_out=record.check_out,
                work_hours=record.work_hours,
                is_early_leave=record.is_early_leave,
                status=record.status,
                department=record.department,
            ),
            actor_user_id=current_user.sub,
            actor_role=current_user.role.value,
            key=str(record.user_id),
        )
    except Exception as e:
        logger.warning(f"Failed to publish check-out event: {e}")

    return AttendanceActionResponse(
        message="Check-out successful",
        attendance=AttendancePublic.model_validate(record),
    )


@router.get("/me/today", response_model=AttendancePublic | None)
async def get_my_today(
    session: SessionDep,
    current_user: CurrentUserDep,
    now: NowDep,
) -> Attendance | None:
    """
    Get the caller's attendance record for today, or null if not checked in.
    """
    return attendance_service.get_for_day(session, current_user.user_id, now.date())


@router.get("", response_model=list[AttendanceWithUser])
async def list_attendance(
    session: SessionDep,
    caller: CallerDep,
    user_id: int | None = None,
    department: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[AttendanceWithUser]:
    """
    List attendance records, newest date first.

    **RBAC:** Employees only see their own records and Directors only their
    own department, whatever filters they send. CEO and Admin may filter freely.

    Args:
        session: Database session (injected)
        caller: Authenticated caller with resolved department
        user_id: Filter by user
        department: Filter by department
        start_date: Start of the date range (applied only with end_date)
        end_date: End of the date range (applied only with start_date)

    Returns:
        Attendance records with the owning user's profile
    """
    scope = scope_attendance(caller, user_id=user_id, department=department)
    logger.info(
        f"Listing attendance for user {caller.user_id} ({caller.role.value}) "
        f"scoped to user={scope.user_id} department={scope.department}"
    )

    records = attendance_service.list_records(
        session, scope, as_local_naive(start_date), as_local_naive(end_date)
    )

    users = {}
    result = []
    for record in records:
        if record.user_id not in users:
            users[record.user_id] = session.get(User, record.user_id)
        user = users[record.user_id]
        item = AttendanceWithUser.model_validate(record)
        item.user = UserSummary.model_validate(user) if user else None
        result.append(item)
    return result


@router.get("/stats", response_model=AttendanceStats)
async def get_attendance_stats(
    session: SessionDep,
    caller: CallerDep,
    now: NowDep,
    user_id: int | None = None,
    department: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> AttendanceStats:
    """
    Aggregate attendance statistics.

    Defaults to the last 30 days ending now. The same role scoping as the
    list endpoint applies.

    Args:
        session: Database session (injected)
        caller: Authenticated caller with resolved department
        now: Server time (injected)
        user_id: Filter by user
        department: Filter by department
        start_date: Start of the window
        end_date: End of the window

    Returns:
        Present, late and absent day counts, the attendance percentage and
        the per-date breakdown
    """
    scope = scope_attendance(caller, user_id=user_id, department=department)
    return attendance_service.stats(
        session, scope, now, as_local_naive(start_date), as_local_naive(end_date)
    )


@router.get("/departments", response_model=list[DepartmentAttendance])
async def get_department_attendance(
    session: SessionDep,
    now: NowDep,
    current_user: Annotated[TokenData, Depends(require_role(Role.CEO))],
) -> list[DepartmentAttendance]:
    """
    Per-department attendance for the current month.

    **RBAC:** CEO only.
    """
    logger.info(f"Department attendance summary requested by {current_user.sub}")
    return attendance_service.department_summary(session, now.date())


@router.get("/diagnostics", response_model=AttendanceDiagnostics)
async def get_attendance_diagnostics(
    session: SessionDep,
    diagnostics: DiagnosticsDep,
    now: NowDep,
    current_user: Annotated[
        TokenData, Depends(require_role(*DIAGNOSTICS_ROLES))
    ],
) -> AttendanceDiagnostics:
    """
    Troubleshooting snapshot of the attendance subsystem.

    **RBAC:** Admin and CEO only.

    Returns:
        Server time, environment, store connectivity, record counts per
        status, recent errors, the latest records per status and the caller
    """
    logger.info(f"Attendance diagnostics requested by {current_user.sub}")

    samples = attendance_service.latest_by_status(session)
    return AttendanceDiagnostics(
        diagnostic_info={
            "server_time": now.isoformat(),
            "environment": settings.ENVIRONMENT,
            "database_connected": check_connection(session),
            "work_start_hour": attendance_service.policy.work_start_hour,
            "work_end_hour": attendance_service.policy.work_end_hour,
        },
        attendance_counts=attendance_service.status_counts(session),
        recent_errors=diagnostics.recent(),
        sample_records={
            status: [AttendancePublic.model_validate(r) for r in records]
            for status, records in samples.items()
        },
        user_info={
            "id": current_user.sub,
            "role": current_user.role.value,
            "department": current_user.department,
            "email": current_user.email,
        },
    )
