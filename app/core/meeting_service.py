"""
Meeting scheduling: time window validation, conflict detection and the
participant bookkeeping behind create, update and delete.

Two meetings conflict when their windows overlap (``a.start < b.end and
a.end > b.start``) and they share at least one person, counting each
meeting's organizer as one of its people.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_
from sqlmodel import Session, col, select

from app.core.config import settings
from app.core.exceptions import (
    DurationExceeded,
    InvalidTimeRange,
    NoParticipants,
    NotAuthorized,
    NotFoundError,
    ScheduleConflict,
)
from app.core.logging import get_logger
from app.core.scoping import Caller, MeetingScope, can_manage
from app.core.user_service import load_users
from app.models.meeting import (
    Meeting,
    MeetingConflict,
    MeetingCreate,
    MeetingParticipant,
    MeetingPublic,
    MeetingStatus,
    MeetingUpdate,
)
from app.models.user import UserSummary

logger = get_logger(__name__)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    return a_start < b_end and a_end > b_start


def validate_time_window(
    start_time: datetime,
    end_time: datetime,
    now: datetime,
    max_hours: float = 8.0,
) -> None:
    if start_time < now:
        raise InvalidTimeRange("Meeting cannot be scheduled in the past")
    if end_time <= start_time:
        raise InvalidTimeRange("End time must be after start time")
    if end_time - start_time > timedelta(hours=max_hours):
        raise DurationExceeded(f"Meeting duration cannot exceed {max_hours:g} hours")


def derive_meeting_status(meeting: Meeting, now: datetime) -> MeetingStatus:
    if now < meeting.start_time:
        return MeetingStatus.SCHEDULED
    if now < meeting.end_time:
        return MeetingStatus.IN_PROGRESS
    return MeetingStatus.COMPLETED


def meeting_people(meeting: Meeting) -> set[int]:
    return {u.id for u in meeting.participants} | {meeting.organizer_id}


def to_public(meeting: Meeting, now: datetime) -> MeetingPublic:
    return MeetingPublic(
        id=meeting.id,
        title=meeting.title,
        description=meeting.description,
        location=meeting.location,
        start_time=meeting.start_time,
        end_time=meeting.end_time,
        status=MeetingStatus(meeting.status),
        current_status=derive_meeting_status(meeting, now),
        department=meeting.department,
        organizer=UserSummary.model_validate(meeting.organizer)
        if meeting.organizer
        else None,
        participants=[
            UserSummary.model_validate(u)
            for u in sorted(meeting.participants, key=lambda u: u.id)
        ],
        created_at=meeting.created_at,
        updated_at=meeting.updated_at,
    )


def describe_conflicts(
    conflicts: list[Meeting], people: set[int], organizer_id: int
) -> list[MeetingConflict]:
    """
    Report each clashing meeting with the names of the people it shares with
    the proposed one. The proposed organizer is reported as a flag instead of
    by name.
    """
    described = []
    for meeting in conflicts:
        shared_users = list(meeting.participants)
        if meeting.organizer is not None:
            shared_users.append(meeting.organizer)

        names = []
        seen = set()
        for user in shared_users:
            if user.id in seen or user.id not in people or user.id == organizer_id:
                continue
            seen.add(user.id)
            names.append(user.name)

        described.append(
            MeetingConflict(
                meeting_id=meeting.id,
                title=meeting.title,
                start_time=meeting.start_time,
                end_time=meeting.end_time,
                conflicting_participants=names,
                organizer_conflict=organizer_id in meeting_people(meeting),
            )
        )
    return described


@dataclass
class MeetingChange:
    """Result of an update: the saved meeting and who was added or removed."""

    meeting: Meeting
    added: list[int] = field(default_factory=list)
    removed: list[int] = field(default_factory=list)


class MeetingService:
    def __init__(self, max_hours: Optional[float] = None):
        self.max_hours = max_hours or settings.MAX_MEETING_HOURS

    def get_or_404(self, session: Session, meeting_id: int) -> Meeting:
        meeting = session.get(Meeting, meeting_id)
        if meeting is None:
            logger.warning(f"Meeting {meeting_id} not found")
            raise NotFoundError("Meeting not found")
        return meeting

    def find_conflicts(
        self,
        session: Session,
        start_time: datetime,
        end_time: datetime,
        people: set[int],
        exclude_id: Optional[int] = None,
    ) -> list[Meeting]:
        if not people:
            return []

        attended_by = select(MeetingParticipant.meeting_id).where(
            col(MeetingParticipant.user_id).in_(people)
        )
        statement = select(Meeting).where(
            Meeting.start_time < end_time,
            Meeting.end_time > start_time,
            or_(
                col(Meeting.organizer_id).in_(people),
                col(Meeting.id).in_(attended_by),
            ),
        )
        if exclude_id is not None:
            statement = statement.where(Meeting.id != exclude_id)
        statement = statement.order_by(col(Meeting.start_time).asc())
        return list(session.exec(statement).all())

    def _raise_on_conflicts(
        self,
        session: Session,
        start_time: datetime,
        end_time: datetime,
        people: set[int],
        organizer_id: int,
        exclude_id: Optional[int] = None,
    ) -> None:
        conflicts = self.find_conflicts(
            session, start_time, end_time, people, exclude_id=exclude_id
        )
        if conflicts:
            described = describe_conflicts(conflicts, people, organizer_id)
            logger.warning(
                f"Schedule conflict for {start_time.isoformat()} - {end_time.isoformat()}: "
                f"meetings {[c.meeting_id for c in described]}"
            )
            raise ScheduleConflict(
                conflicts=[c.model_dump(mode="json") for c in described],
                conflicting_participants=sorted(
                    {name for c in described for name in c.conflicting_participants}
                ),
            )

    def create(
        self, session: Session, draft: MeetingCreate, caller: Caller, now: datetime
    ) -> Meeting:
        validate_time_window(draft.start_time, draft.end_time, now, self.max_hours)
        if not draft.participants:
            raise NoParticipants()

        participants = load_users(session, draft.participants)
        people = {u.id for u in participants} | {caller.user_id}
        self._raise_on_conflicts(
            session, draft.start_time, draft.end_time, people, caller.user_id
        )

        meeting = Meeting(
            title=draft.title,
            description=draft.description,
            location=draft.location,
            start_time=draft.start_time,
            end_time=draft.end_time,
            status=MeetingStatus.SCHEDULED.value,
            organizer_id=caller.user_id,
            department=draft.department
            or caller.department
            or settings.DEFAULT_DEPARTMENT,
        )
        meeting.participants = participants
        session.add(meeting)
        session.commit()
        session.refresh(meeting)

        logger.info(
            f"Meeting {meeting.id} scheduled by user {caller.user_id} "
            f"with {len(participants)} participant(s)"
        )
        return meeting

    def update(
        self,
        session: Session,
        meeting_id: int,
        patch: MeetingUpdate,
        caller: Caller,
        now: datetime,
    ) -> MeetingChange:
        meeting = self.get_or_404(session, meeting_id)
        if not can_manage(caller, {meeting.organizer_id}):
            logger.warning(
                f"User {caller.user_id} attempted to modify meeting {meeting_id} "
                f"organized by {meeting.organizer_id}"
            )
            raise NotAuthorized("Not authorized to update this meeting")

        start_time = patch.start_time or meeting.start_time
        end_time = patch.end_time or meeting.end_time
        validate_time_window(start_time, end_time, now, self.max_hours)

        previous_ids = [u.id for u in meeting.participants]
        if patch.participants is not None:
            if not patch.participants:
                raise NoParticipants()
            participants = load_users(session, patch.participants)
        else:
            participants = list(meeting.participants)

        people = {u.id for u in participants}
        self._raise_on_conflicts(
            session,
            start_time,
            end_time,
            people,
            meeting.organizer_id,
            exclude_id=meeting.id,
        )

        updates = patch.model_dump(
            exclude_unset=True, exclude={"participants", "start_time", "end_time"}
        )
        for key, value in updates.items():
            if value is not None:
                setattr(meeting, key, value)
        meeting.start_time = start_time
        meeting.end_time = end_time
        meeting.participants = participants
        meeting.updated_at = datetime.utcnow()

        session.add(meeting)
        session.commit()
        session.refresh(meeting)

        current_ids = [u.id for u in participants]
        added = [i for i in current_ids if i not in previous_ids]
        removed = [i for i in previous_ids if i not in current_ids]
        logger.info(
            f"Meeting {meeting.id} updated by user {caller.user_id}: "
            f"{len(added)} added, {len(removed)} removed"
        )
        return MeetingChange(meeting=meeting, added=added, removed=removed)

    def delete(self, session: Session, meeting_id: int, caller: Caller) -> MeetingChange:
        """
        Delete a meeting the caller organizes (or any meeting for the top role).
        Returns a detached copy, with every former participant listed as removed.
        """
        meeting = self.get_or_404(session, meeting_id)
        if not can_manage(caller, {meeting.organizer_id}):
            logger.warning(
                f"User {caller.user_id} attempted to delete meeting {meeting_id} "
                f"organized by {meeting.organizer_id}"
            )
            raise NotAuthorized("Not authorized to delete this meeting")

        snapshot = Meeting(
            id=meeting.id,
            title=meeting.title,
            description=meeting.description,
            location=meeting.location,
            start_time=meeting.start_time,
            end_time=meeting.end_time,
            status=meeting.status,
            organizer_id=meeting.organizer_id,
            department=meeting.department,
        )
        participant_ids = [u.id for u in meeting.participants]

        session.delete(meeting)
        session.commit()
        logger.info(f"Meeting {meeting_id} deleted by user {caller.user_id}")

        return MeetingChange(meeting=snapshot, removed=participant_ids)

    def list_meetings(self, session: Session, scope: MeetingScope) -> list[Meeting]:
        statement = select(Meeting)
        if scope.member_id is not None:
            attended = select(MeetingParticipant.meeting_id).where(
                MeetingParticipant.user_id == scope.member_id
            )
            statement = statement.where(
                or_(
                    Meeting.organizer_id == scope.member_id,
                    col(Meeting.id).in_(attended),
                )
            )
        if scope.department:
            statement = statement.where(Meeting.department == scope.department)
        if scope.organizer_id is not None:
            statement = statement.where(Meeting.organizer_id == scope.organizer_id)

        statement = statement.order_by(col(Meeting.start_time).asc())
        return list(session.exec(statement).all())


meeting_service = MeetingService()
