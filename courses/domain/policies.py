"""Workflow rules shared by the services and request validation."""

from collections.abc import Iterable, Mapping
from datetime import datetime
from enum import StrEnum
from typing import TypeVar

from courses.domain.errors import InvalidFieldError, InvalidStatusTransitionError
from courses.domain.value_objects import EnrollmentStatus, LessonStatus

E = TypeVar("E", bound=StrEnum)

MIN_PARTICIPANT_AGE = 16
MAX_PARTICIPANT_AGE = 100

LESSON_TRANSITIONS: Mapping[LessonStatus, frozenset[LessonStatus]] = {
    LessonStatus.SCHEDULED: frozenset(
        {LessonStatus.COMPLETED, LessonStatus.CANCELLED}
    ),
    LessonStatus.COMPLETED: frozenset(),
    LessonStatus.CANCELLED: frozenset(),
}

ENROLLMENT_TRANSITIONS: Mapping[EnrollmentStatus, frozenset[EnrollmentStatus]] = {
    EnrollmentStatus.ENROLLED: frozenset(
        {EnrollmentStatus.COMPLETED, EnrollmentStatus.CANCELLED}
    ),
    EnrollmentStatus.COMPLETED: frozenset(),
    EnrollmentStatus.CANCELLED: frozenset(),
}


def ensure_transition(
    transitions: Mapping[E, frozenset[E]],
    current: E,
    requested: E,
) -> None:
    """Raise InvalidStatusTransitionError unless current may become requested.

    Keeping the current status is always allowed.
    """
    if current == requested:
        return
    if requested not in transitions.get(current, frozenset()):
        raise InvalidStatusTransitionError(str(current), str(requested))


def ensure_schedulable(
    date_time: datetime,
    statuses: Iterable[str | None],
    now: datetime,
) -> None:
    """Reject a lesson date in the past unless one of statuses is completed.

    statuses holds the requested status and, on update, the stored one.
    """
    if date_time >= now:
        return
    if any(status == LessonStatus.COMPLETED for status in statuses):
        return
    raise InvalidFieldError("dateTime", "Lesson cannot be scheduled in the past")
