"""
Unit tests for meeting time window validation, overlap and derived status.
"""

from datetime import datetime, timedelta
from itertools import product

import pytest

from app.core.exceptions import DurationExceeded, InvalidTimeRange
from app.core.meeting_service import (
    derive_meeting_status,
    intervals_overlap,
    validate_time_window,
)
from app.models.meeting import Meeting, MeetingStatus

NOW = datetime(2026, 3, 10, 8, 30)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 11, hour, minute)


def test_overlap_is_symmetric():
    points = [at(h, m) for h in range(13, 17) for m in (0, 30)]
    windows = [(s, e) for s, e in product(points, points) if s < e]

    for (a_start, a_end), (b_start, b_end) in product(windows, windows):
        assert intervals_overlap(a_start, a_end, b_start, b_end) == intervals_overlap(
            b_start, b_end, a_start, a_end
        )


@pytest.mark.parametrize(
    "other,expected",
    [
        ((at(14, 30), at(15, 30)), True),
        ((at(13, 0), at(14, 0)), False),
        ((at(15, 0), at(16, 0)), False),
        ((at(14, 15), at(14, 45)), True),
        ((at(13, 0), at(16, 0)), True),
    ],
)
def test_touching_windows_do_not_overlap(other, expected):
    assert intervals_overlap(at(14), at(15), *other) is expected


def test_valid_window_passes():
    validate_time_window(at(14), at(15), NOW)


def test_start_in_the_past_is_invalid():
    with pytest.raises(InvalidTimeRange) as exc_info:
        validate_time_window(NOW - timedelta(minutes=1), NOW + timedelta(hours=1), NOW)

    assert exc_info.value.message == "Meeting cannot be scheduled in the past"


def test_end_equal_to_start_is_invalid():
    with pytest.raises(InvalidTimeRange) as exc_info:
        validate_time_window(at(14), at(14), NOW)

    assert exc_info.value.message == "End time must be after start time"


def test_eight_hours_is_allowed_but_not_more():
    validate_time_window(at(9), at(17), NOW)

    with pytest.raises(DurationExceeded):
        validate_time_window(at(9), at(17, 1), NOW)


def test_derived_status_follows_the_clock():
    meeting = Meeting(
        title="Standup",
        description="Daily",
        location="Room 1",
        start_time=at(14),
        end_time=at(15),
        organizer_id=1,
    )

    assert derive_meeting_status(meeting, at(13, 59)) == MeetingStatus.SCHEDULED
    assert derive_meeting_status(meeting, at(14)) == MeetingStatus.IN_PROGRESS
    assert derive_meeting_status(meeting, at(14, 59)) == MeetingStatus.IN_PROGRESS
    assert derive_meeting_status(meeting, at(15)) == MeetingStatus.COMPLETED
