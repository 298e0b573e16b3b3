"""
Kafka Topic Definitions for the Workplace Tracker Service.

Topic naming follows the pattern: <domain>-<event-type>
This makes topics easily identifiable and organized by business domain.
"""

from app.core.events import EventType


class KafkaTopics:
    """
    Central registry of all Kafka topics used by the Workplace Tracker Service.
    Topics are named following the pattern: <domain>-<event-type>
    """

    # Attendance Events - Check-in/Check-out lifecycle
    ATTENDANCE_CHECKIN = "attendance-checkin"
    ATTENDANCE_CHECKOUT = "attendance-checkout"

    # Meeting Events - Scheduling lifecycle
    MEETING_SCHEDULED = "meeting-scheduled"
    MEETING_UPDATED = "meeting-updated"
    MEETING_CANCELLED = "meeting-cancelled"

    # Task Events
    TASK_ASSIGNED = "task-assigned"
    TASK_UPDATED = "task-updated"

    @classmethod
    def all_topics(cls) -> list[str]:
        """Return list of all topic names."""
        return [
            value
            for name, value in vars(cls).items()
            if isinstance(value, str) and not name.startswith("_")
        ]

    @classmethod
    def for_event(cls, event_type: EventType) -> str:
        """Topic an event type is published to."""
        return getattr(cls, event_type.name)
