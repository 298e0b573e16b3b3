"""
Domain exceptions for the Workplace Tracker Service.

Every failure carries a machine-checkable ``kind`` and the HTTP status it maps
to. Services raise these; the handlers registered in ``app.main`` render them
as ``{"detail": <message>, "error": <kind>, ...details}``.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for business rule violations surfaced to the caller."""

    kind: str = "INTERNAL"
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message, "error": self.kind}
        body.update(self.details)
        return body


class ValidationError(AppError):
    """Raised when input data is missing, malformed or violates a rule."""

    kind = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid request"


class ConflictError(AppError):
    kind = "CONFLICT"
    status_code = 409
    default_message = "Conflicting state"


class NotFoundError(AppError):
    kind = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class ForbiddenError(AppError):
    kind = "FORBIDDEN"
    status_code = 403
    default_message = "Unauthorized access"


class UnauthenticatedError(AppError):
    kind = "UNAUTHENTICATED"
    status_code = 401
    default_message = "Token verification failed, authorization denied"


class UnavailableError(AppError):
    kind = "UNAVAILABLE"
    status_code = 503
    default_message = "Database connection error, please try again later"


# Attendance


class AlreadyCheckedIn(ConflictError):
    kind = "ALREADY_CHECKED_IN"
    status_code = 400
    default_message = "Already checked in for today"


class AlreadyCompletedToday(ConflictError):
    kind = "ALREADY_COMPLETED_TODAY"
    status_code = 400
    default_message = "Already checked out for today"


class AlreadyCheckedOut(ConflictError):
    kind = "ALREADY_CHECKED_OUT"
    status_code = 400
    default_message = "Already checked out for today"


class NoCheckInFound(ValidationError):
    kind = "NO_CHECK_IN_FOUND"
    default_message = "No check-in record found for today"


# Meetings


class InvalidTimeRange(ValidationError):
    kind = "INVALID_TIME_RANGE"
    default_message = "End time must be after start time"


class DurationExceeded(ValidationError):
    kind = "DURATION_EXCEEDED"
    default_message = "Meeting duration cannot exceed 8 hours"


class NoParticipants(ValidationError):
    kind = "NO_PARTICIPANTS"
    default_message = "At least one participant is required"


class ScheduleConflict(ConflictError):
    kind = "SCHEDULE_CONFLICT"
    default_message = "Schedule conflict detected"


class NotAuthorized(ForbiddenError):
    kind = "NOT_AUTHORIZED"
    default_message = "Not authorized"
