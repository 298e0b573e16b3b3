from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import CallerDep, NowDep, SessionDep
from app.core.events import EventType, MeetingEvent
from app.core.kafka import publish_domain_event
from app.core.logging import get_logger
from app.core.meeting_service import MeetingChange, meeting_service, to_public
from app.core.notification_service import notify_users
from app.core.scoping import ELEVATED_ROLES, scope_meetings
from app.core.security import TokenData, require_role
from app.models.meeting import Meeting, MeetingCreate, MeetingPublic, MeetingUpdate
from app.models.notification import NotificationType

logger = get_logger(__name__)

router = APIRouter(
    prefix="/meetings",
    tags=["meetings"],
    responses={404: {"description": "Meeting not found"}},
)

OrganizerDep = Annotated[TokenData, Depends(require_role(*ELEVATED_ROLES))]


async def _publish_meeting_event(
    event_type: EventType,
    change: MeetingChange,
    participant_ids: list[int],
    current_user: TokenData,
) -> None:
    meeting = change.meeting
    try:
        await publish_domain_event(
            event_type,
            MeetingEvent(
                meeting_id=meeting.id,
                title=meeting.title,
                start_time=meeting.start_time,
                end_time=meeting.end_time,
                organizer_id=meeting.organizer_id,
                department=meeting.department,
                participant_ids=participant_ids,
                added_participant_ids=change.added,
                removed_participant_ids=change.removed,
            ),
            actor_user_id=current_user.sub,
            actor_role=current_user.role.value,
            key=str(meeting.id),
        )
    except Exception as e:
        logger.warning(f"Failed to publish {event_type.value} event: {e}")


@router.get("", response_model=list[MeetingPublic])
async def list_meetings(
    session: SessionDep,
    caller: CallerDep,
    now: NowDep,
    department: str | None = None,
    organizer_id: int | None = None,
) -> list[MeetingPublic]:
    """
    List meetings ordered by start time.

    **RBAC:** Employees see meetings they organize or attend, Directors see
    their own department, CEO and Admin may filter freely.

    Args:
        session: Database session (injected)
        caller: Authenticated caller with resolved department
        now: Server time used to derive each meeting's current status
        department: Filter by department
        organizer_id: Filter by organizer

    Returns:
        Meetings with organizer, participants and derived current status
    """
    scope = scope_meetings(caller, department=department, organizer_id=organizer_id)
    meetings = meeting_service.list_meetings(session, scope)
    return [to_public(m, now) for m in meetings]


@router.post("", response_model=MeetingPublic, status_code=201)
async def create_meeting(
    draft: MeetingCreate,
    session: SessionDep,
    caller: CallerDep,
    current_user: OrganizerDep,
    now: NowDep,
) -> MeetingPublic:
    """
    Schedule a meeting organized by the caller.

    **RBAC:** CEO and Director only.

    Args:
        draft: Meeting details and participant ids
        session: Database session (injected)
        caller: Authenticated caller with resolved department
        current_user: Current authenticated user
        now: Server time (injected)

    Returns:
        The scheduled meeting

    Raises:
        InvalidTimeRange: 400 if the start is in the past or the end is not after it
        DurationExceeded: 400 if the meeting is longer than 8 hours
        NoParticipants: 400 if no participants are given
        ScheduleConflict: 409 with the clashing meetings and participant names
    """
    logger.info(
        f"Meeting '{draft.title}' requested by user {caller.user_id} "
        f"for {draft.start_time.isoformat()} - {draft.end_time.isoformat()}"
    )

    meeting = meeting_service.create(session, draft, caller, now)
    participant_ids = [u.id for u in meeting.participants]

    notify_users(
        session,
        [i for i in participant_ids if i != meeting.organizer_id],
        NotificationType.MEETING_SCHEDULED,
        "New Meeting",
        f"You have been invited to: {meeting.title}",
        meeting.id,
    )

    await _publish_meeting_event(
        EventType.MEETING_SCHEDULED,
        MeetingChange(meeting=meeting, added=participant_ids),
        participant_ids,
        current_user,
    )

    session.refresh(meeting)
    return to_public(meeting, now)


@router.put("/{meeting_id}", response_model=MeetingPublic)
async def update_meeting(
    meeting_id: int,
    patch: MeetingUpdate,
    session: SessionDep,
    caller: CallerDep,
    current_user: OrganizerDep,
    now: NowDep,
) -> MeetingPublic:
    """
    Update a meeting.

    **RBAC:** CEO and Director; only the organizer or the CEO may change a
    given meeting.

    Added participants receive an invitation, removed participants a removal
    notice.

    Raises:
        NotFoundError: 404 if the meeting does not exist
        NotAuthorized: 403 if the caller is neither organizer nor CEO
        ScheduleConflict: 409 if the new window clashes with another meeting
    """
    logger.info(f"Meeting {meeting_id} update requested by user {caller.user_id}")

    change = meeting_service.update(session, meeting_id, patch, caller, now)
    meeting = change.meeting
    title = meeting.title

    notify_users(
        session,
        change.added,
        NotificationType.MEETING_SCHEDULED,
        "Meeting Invitation",
        f"You've been added to meeting: {title}",
        meeting_id,
    )
    notify_users(
        session,
        change.removed,
        NotificationType.MEETING_CANCELLED,
        "Meeting Removal",
        f"You've been removed from meeting: {title}",
        meeting_id,
    )

    session.refresh(meeting)
    await _publish_meeting_event(
        EventType.MEETING_UPDATED,
        change,
        [u.id for u in meeting.participants],
        current_user,
    )
    return to_public(meeting, now)


@router.delete("/{meeting_id}")
async def delete_meeting(
    meeting_id: int,
    session: SessionDep,
    caller: CallerDep,
    current_user: OrganizerDep,
) -> dict[str, str]:
    """
    Cancel a meeting and notify every participant.

    **RBAC:** CEO and Director; only the organizer or the CEO may delete a
    given meeting.

    Raises:
        NotFoundError: 404 if the meeting does not exist
        NotAuthorized: 403 if the caller is neither organizer nor CEO
    """
    logger.info(f"Meeting {meeting_id} deletion requested by user {caller.user_id}")

    change = meeting_service.delete(session, meeting_id, caller)
    meeting: Meeting = change.meeting

    notify_users(
        session,
        change.removed,
        NotificationType.MEETING_CANCELLED,
        "Meeting Cancelled",
        f'The meeting "{meeting.title}" has been cancelled',
        meeting_id,
    )

    await _publish_meeting_event(
        EventType.MEETING_CANCELLED, change, change.removed, current_user
    )
    return {"message": "Meeting deleted"}
