"""
Attendance engine.

Status rules (evaluated in order, last match wins):
- base: LATE if checked in after the work start hour, else PRESENT
- checked in at or after the late cutoff hour -> LATE
- worked less than ABSENT_BELOW_HOURS -> ABSENT
- else worked less than FULL_DAY_HOURS -> HALF_DAY

Leaving before the work end hour only sets ``is_early_leave``; it never writes
a status outside AttendanceStatus.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import and_, case, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from app.core.cache import CacheKeys, RedisClient
from app.core.config import settings
from app.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AlreadyCompletedToday,
    NoCheckInFound,
    ValidationError,
)
from app.core.logging import get_logger
from app.core.scoping import AttendanceScope
from app.models.attendance import (
    Attendance,
    AttendanceByDate,
    AttendancePublic,
    AttendanceStats,
    AttendanceStatus,
    DepartmentAttendance,
)

logger = get_logger(__name__)

SECONDS_PER_HOUR = 3600.0
SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class WorkdayPolicy:
    work_start_hour: int = 9
    work_end_hour: int = 17
    late_cutoff_hour: int = 10
    absent_below_hours: float = 4.0
    full_day_hours: float = 8.0

    @classmethod
    def from_settings(cls) -> "WorkdayPolicy":
        return cls(
            work_start_hour=settings.WORK_START_HOUR,
            work_end_hour=settings.WORK_END_HOUR,
            late_cutoff_hour=settings.LATE_CUTOFF_HOUR,
            absent_below_hours=settings.ABSENT_BELOW_HOURS,
            full_day_hours=settings.FULL_DAY_HOURS,
        )

    def work_start(self, day: date) -> datetime:
        return datetime.combine(day, time(hour=self.work_start_hour))

    def work_end(self, day: date) -> datetime:
        return datetime.combine(day, time(hour=self.work_end_hour))


def work_hours_between(check_in: datetime, check_out: datetime) -> float:
    return (check_out - check_in).total_seconds() / SECONDS_PER_HOUR


def is_late_check_in(check_in: datetime, policy: WorkdayPolicy) -> bool:
    return check_in > policy.work_start(check_in.date())


def is_early_leave(check_out: datetime, day: date, policy: WorkdayPolicy) -> bool:
    return check_out < policy.work_end(day)


def derive_status(
    check_in: datetime,
    check_out: Optional[datetime],
    policy: WorkdayPolicy,
) -> AttendanceStatus:
    status = (
        AttendanceStatus.LATE
        if is_late_check_in(check_in, policy)
        else AttendanceStatus.PRESENT
    )
    if check_out is None:
        return status

    hours = work_hours_between(check_in, check_out)
    if check_in.hour >= policy.late_cutoff_hour:
        status = AttendanceStatus.LATE
    if hours < policy.absent_below_hours:
        status = AttendanceStatus.ABSENT
    elif hours < policy.full_day_hours:
        status = AttendanceStatus.HALF_DAY
    return status


def stats_window(
    start: Optional[datetime],
    end: Optional[datetime],
    now: datetime,
    default_days: int = 30,
) -> tuple[datetime, datetime]:
    end = end or now
    start = start or end - timedelta(days=default_days)
    return start, end


def department_summary_key(today: date) -> str:
    return CacheKeys.department_summary(
        today.replace(day=1).strftime("%Y-%m"), today.isoformat()
    )


def summarize(records: list[Attendance], start: datetime, end: datetime) -> AttendanceStats:
    """
    Headline counters cover PRESENT, LATE and ABSENT only; HALF_DAY records are
    listed per date but not counted. The percentage divides by calendar days
    in the window, not by record count.
    """
    total_days = max(math.ceil((end - start).total_seconds() / SECONDS_PER_DAY), 0)
    stats = AttendanceStats(total_days=total_days)

    for record in records:
        if record.status == AttendanceStatus.PRESENT:
            stats.present_days += 1
        elif record.status == AttendanceStatus.LATE:
            stats.late_days += 1
        elif record.status == AttendanceStatus.ABSENT:
            stats.absent_days += 1

        stats.attendance_by_date.append(
            AttendanceByDate(
                date=record.date,
                status=record.status,
                check_in=record.check_in,
                check_out=record.check_out,
            )
        )

    stats.attendance_percentage = (
        stats.present_days / total_days * 100 if total_days else 0.0
    )
    return stats


class AttendanceService:
    """Check-in/check-out state transitions and attendance queries."""

    def __init__(self, policy: Optional[WorkdayPolicy] = None):
        self.policy = policy or WorkdayPolicy.from_settings()

    def get_for_day(self, session: Session, user_id: int, day: date) -> Optional[Attendance]:
        statement = select(Attendance).where(
            (Attendance.user_id == user_id) & (Attendance.date == day)
        )
        return session.exec(statement).first()

    def check_in(
        self, session: Session, user_id: int, department: str, now: datetime
    ) -> Attendance:
        today = now.date()

        existing = self.get_for_day(session, user_id, today)
        if existing:
            payload = AttendancePublic.model_validate(existing).model_dump(mode="json")
            if existing.check_out:
                raise AlreadyCompletedToday(attendance=payload)
            raise AlreadyCheckedIn(attendance=payload)

        status = derive_status(now, None, self.policy)
        logger.info(
            f"Check-in for user {user_id} at {now.isoformat()}, "
            f"work start {self.policy.work_start(today).isoformat()}, status {status.value}"
        )

        record = Attendance(
            user_id=user_id,
            date=today,
            check_in=now,
            status=status.value,
            work_hours=0.0,
            department=department,
        )
        session.add(record)
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if self.get_for_day(session, user_id, today) is not None:
                logger.warning(f"Concurrent check-in for user {user_id} on {today} rejected")
                raise AlreadyCheckedIn()
            logger.error(f"Check-in for user {user_id} violated a constraint: {e}")
            raise ValidationError("Invalid user information")

        session.refresh(record)
        RedisClient.delete(department_summary_key(today))
        logger.info(f"Attendance record {record.id} created for user {user_id}")
        return record

    def check_out(self, session: Session, user_id: int, now: datetime) -> Attendance:
        today = now.date()

        record = self.get_for_day(session, user_id, today)
        if not record:
            logger.warning(f"Check-out attempted but no check-in found for user {user_id} on {today}")
            raise NoCheckInFound()
        if record.check_out is not None:
            raise AlreadyCheckedOut(
                attendance=AttendancePublic.model_validate(record).model_dump(mode="json")
            )

        work_hours = work_hours_between(record.check_in, now)
        status = derive_status(record.check_in, now, self.policy)
        early = is_early_leave(now, record.date, self.policy)

        # Only the first check-out for the record can match check_out IS NULL
        statement = (
            update(Attendance)
            .where(col(Attendance.id) == record.id, col(Attendance.check_out).is_(None))
            .values(
                check_out=now,
                work_hours=work_hours,
                status=status.value,
                is_early_leave=early,
                updated_at=datetime.utcnow(),
            )
        )
        result = session.connection().execute(statement)
        if result.rowcount == 0:
            session.rollback()
            raise AlreadyCheckedOut()
        session.commit()
        session.refresh(record)
        RedisClient.delete(department_summary_key(record.date))

        logger.info(
            f"User {user_id} checked out at {now.isoformat()}: "
            f"{work_hours:.2f}h, status {status.value}, early leave {early}"
        )
        return record

    def list_records(
        self,
        session: Session,
        scope: AttendanceScope,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Attendance]:
        statement = select(Attendance)
        if start and end:
            statement = statement.where(
                (Attendance.date >= start.date()) & (Attendance.date <= end.date())
            )
        if scope.department:
            statement = statement.where(Attendance.department == scope.department)
        if scope.user_id is not None:
            statement = statement.where(Attendance.user_id == scope.user_id)

        statement = statement.order_by(col(Attendance.date).desc())
        return list(session.exec(statement).all())

    def stats(
        self,
        session: Session,
        scope: AttendanceScope,
        now: datetime,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> AttendanceStats:
        start, end = stats_window(start, end, now, settings.STATS_DEFAULT_DAYS)
        statement = select(Attendance).where(
            (Attendance.date >= start.date()) & (Attendance.date <= end.date())
        )
        if scope.department:
            statement = statement.where(Attendance.department == scope.department)
        if scope.user_id is not None:
            statement = statement.where(Attendance.user_id == scope.user_id)
        statement = statement.order_by(col(Attendance.date).asc())

        records = list(session.exec(statement).all())
        return summarize(records, start, end)

    def department_summary(self, session: Session, today: date) -> list[DepartmentAttendance]:
        month_start = today.replace(day=1)
        cache_key = department_summary_key(today)
        cached = RedisClient.get_json(cache_key)
        if cached is not None:
            return [DepartmentAttendance(**row) for row in cached]

        is_present = Attendance.status == AttendanceStatus.PRESENT.value
        statement = (
            select(
                Attendance.department,
                func.sum(case((is_present, 1), else_=0)),
                func.count(col(Attendance.id)),
                func.sum(case((and_(is_present, Attendance.date == today), 1), else_=0)),
            )
            .where((Attendance.date >= month_start) & (Attendance.date <= today))
            .group_by(Attendance.department)
            .order_by(Attendance.department)
        )

        summary = []
        for department, present, total, present_today in session.exec(statement).all():
            present = int(present or 0)
            total = int(total or 0)
            summary.append(
                DepartmentAttendance(
                    department=department,
                    present=present,
                    total=total,
                    present_today=int(present_today or 0),
                    average_attendance=present / total * 100 if total else 0.0,
                )
            )

        RedisClient.set_json(
            cache_key, [row.model_dump() for row in summary], settings.SUMMARY_CACHE_TTL
        )
        return summary

    def status_counts(self, session: Session) -> dict[str, int]:
        statement = select(Attendance.status, func.count(col(Attendance.id))).group_by(
            Attendance.status
        )
        return {status: int(count) for status, count in session.exec(statement).all()}

    def latest_by_status(
        self, session: Session, limit: int = 2
    ) -> dict[str, list[Attendance]]:
        samples = {}
        for status in AttendanceStatus:
            statement = (
                select(Attendance)
                .where(Attendance.status == status.value)
                .order_by(col(Attendance.created_at).desc())
                .limit(limit)
            )
            samples[status.value] = list(session.exec(statement).all())
        return samples


attendance_service = AttendanceService()
