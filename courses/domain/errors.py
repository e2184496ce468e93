"""Domain error codes for the courses module.

Errors are grouped by kind (not found, conflict, capacity, validation, store)
so callers can map a whole family to a single response.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    PARTICIPANT_NOT_FOUND = "PARTICIPANT_NOT_FOUND"
    LESSON_NOT_FOUND = "LESSON_NOT_FOUND"
    ENROLLMENT_NOT_FOUND = "ENROLLMENT_NOT_FOUND"
    ALREADY_ENROLLED = "ALREADY_ENROLLED"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    LESSON_HAS_ACTIVE_ENROLLMENTS = "LESSON_HAS_ACTIVE_ENROLLMENTS"
    PARTICIPANT_INACTIVE = "PARTICIPANT_INACTIVE"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    LESSON_FULL = "LESSON_FULL"
    INVALID_ID = "INVALID_ID"
    INVALID_FIELD = "INVALID_FIELD"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """An id does not resolve to an existing record."""


class ConflictError(DomainError):
    """The request clashes with the current state of a record."""


class CapacityExceededError(DomainError):
    """A lesson has no room left."""


class DomainValidationError(DomainError):
    """A value reaching the domain is malformed."""


class ParticipantNotFoundError(NotFoundError):
    """Raised when a participant is not found."""

    def __init__(self, participant_id: str) -> None:
        super().__init__(
            code=ErrorCode.PARTICIPANT_NOT_FOUND,
            message="Participant not found",
        )
        self.participant_id = participant_id


class LessonNotFoundError(NotFoundError):
    """Raised when a lesson is not found."""

    def __init__(self, lesson_id: str) -> None:
        super().__init__(
            code=ErrorCode.LESSON_NOT_FOUND,
            message="Lesson not found",
        )
        self.lesson_id = lesson_id


class EnrollmentNotFoundError(NotFoundError):
    """Raised when a participant has no enrollment in a lesson."""

    def __init__(self, lesson_id: str, participant_id: str) -> None:
        super().__init__(
            code=ErrorCode.ENROLLMENT_NOT_FOUND,
            message="Enrollment not found",
        )
        self.lesson_id = lesson_id
        self.participant_id = participant_id


class AlreadyEnrolledError(ConflictError):
    """Raised when a participant is enrolled in the same lesson twice."""

    def __init__(self, lesson_id: str, participant_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_ENROLLED,
            message="Participant already enrolled in this lesson",
        )
        self.lesson_id = lesson_id
        self.participant_id = participant_id


class DuplicateEmailError(ConflictError):
    """Raised by stores when another participant already uses the email."""

    def __init__(self, email: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_EMAIL,
            message="A participant with this email already exists",
        )
        self.email = email


class LessonHasActiveEnrollmentsError(ConflictError):
    """Raised when deleting a lesson that still has enrolled participants."""

    def __init__(self, lesson_id: str, active_count: int) -> None:
        super().__init__(
            code=ErrorCode.LESSON_HAS_ACTIVE_ENROLLMENTS,
            message=(
                f"Lesson has {active_count} active enrollment(s). Please cancel "
                "enrollments first or change lesson status to 'cancelled'."
            ),
        )
        self.lesson_id = lesson_id
        self.active_count = active_count


class ParticipantInactiveError(ConflictError):
    """Raised when enrolling a participant that has been deactivated."""

    def __init__(self, participant_id: str) -> None:
        super().__init__(
            code=ErrorCode.PARTICIPANT_INACTIVE,
            message="Participant is inactive",
        )
        self.participant_id = participant_id


class ConcurrentModificationError(ConflictError):
    """Raised by stores when a record changed since it was read."""

    def __init__(self, entity: str, record_id: str) -> None:
        super().__init__(
            code=ErrorCode.CONCURRENT_MODIFICATION,
            message=f"The {entity} was modified by another request, please retry",
        )
        self.entity = entity
        self.record_id = record_id


class LessonFullError(CapacityExceededError):
    """Raised when a lesson is at maximum capacity."""

    def __init__(self, lesson_id: str, capacity: int) -> None:
        super().__init__(
            code=ErrorCode.LESSON_FULL,
            message="Lesson is at maximum capacity",
        )
        self.lesson_id = lesson_id
        self.capacity = capacity


class InvalidIdError(DomainValidationError):
    """Raised when an ID is invalid."""

    def __init__(self, entity: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {entity} ID format",
        )
        self.entity = entity


class InvalidFieldError(DomainValidationError):
    """Raised when a field is unknown, managed by the service, or malformed."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_FIELD,
            message=f"Invalid value for {field}: {reason}",
        )
        self.field = field
        self.reason = reason


class InvalidStatusTransitionError(DomainValidationError):
    """Raised when a status change is not allowed by the workflow."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot change status from {current} to {requested}",
        )
        self.current = current
        self.requested = requested


class StoreError(DomainError):
    """Raised when the backing store fails; the cause is chained."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="The data store is unavailable",
        )
        self.operation = operation
