"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in courses/models.py (persistence layer).

Enrollments have no store of their own: they live inside their Lesson, so
every enrollment change produces a new Lesson.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Self

from courses.domain.value_objects import (
    Capacity,
    EmergencyContact,
    EnrollmentId,
    EnrollmentStatus,
    LessonId,
    LessonStatus,
    Money,
    ParticipantId,
    PaymentStatus,
    SkillLevel,
)


@dataclass(frozen=True)
class Participant:
    """Domain representation of a Participant."""

    id: ParticipantId
    first_name: str
    last_name: str
    email: str
    registration_date: datetime
    phone: str | None = None
    age: int | None = None
    allergies: tuple[str, ...] = ()
    dietary_restrictions: tuple[str, ...] = ()
    emergency_contact: EmergencyContact | None = None
    is_active: bool = True
    version: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Enrollment:
    """Domain representation of an Enrollment."""

    id: EnrollmentId
    lesson_id: LessonId
    participant_id: ParticipantId
    enrollment_date: datetime
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: str | None = None


@dataclass(frozen=True)
class Lesson:
    """Domain representation of a Lesson."""

    id: LessonId
    title: str
    description: str
    skill_level: SkillLevel
    duration: int
    max_participants: Capacity
    price: Money
    date_time: datetime
    created_at: datetime
    updated_at: datetime
    location: str = ""
    instructor: str = ""
    ingredients: tuple[str, ...] = ()
    equipment: tuple[str, ...] = ()
    techniques: tuple[str, ...] = ()
    status: LessonStatus = LessonStatus.SCHEDULED
    enrollments: tuple[Enrollment, ...] = ()
    version: int = 0

    @property
    def active_enrollment_count(self) -> int:
        return sum(
            1 for e in self.enrollments if e.status == EnrollmentStatus.ENROLLED
        )

    @property
    def spots_remaining(self) -> int:
        return max(self.max_participants.value - self.active_enrollment_count, 0)

    @property
    def is_full(self) -> bool:
        return self.active_enrollment_count >= self.max_participants.value

    def enrollment_for(self, participant_id: ParticipantId) -> Enrollment | None:
        """Return the participant's enrollment in this lesson, if any."""
        for enrollment in self.enrollments:
            if enrollment.participant_id == participant_id:
                return enrollment
        return None

    def with_enrollments(self, enrollments: Iterable[Enrollment], now: datetime) -> Self:
        return replace(self, enrollments=tuple(enrollments), updated_at=now)


@dataclass(frozen=True)
class ParticipantEnrollment:
    """An enrollment paired with the lesson that owns it."""

    lesson: Lesson
    enrollment: Enrollment


@dataclass(frozen=True)
class LessonRoster:
    """A lesson together with the participants it has enrollments for."""

    lesson: Lesson
    participants: tuple[Participant, ...] = ()
