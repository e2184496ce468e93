"""Enrollment service - manages the enrollments embedded in each lesson.

Every change reads the owning lesson, edits its enrollment tuple and writes
the whole lesson back with a version check. A lost race re-runs the whole
operation so capacity and duplicate checks always see fresh data.
"""

import dataclasses
from collections.abc import Callable
from datetime import datetime

from courses.domain import (
    Enrollment,
    EnrollmentId,
    EnrollmentStatus,
    Lesson,
    LessonId,
    LessonRoster,
    ParticipantEnrollment,
    ParticipantId,
    PaymentStatus,
)
from courses.domain.errors import (
    AlreadyEnrolledError,
    EnrollmentNotFoundError,
    InvalidFieldError,
    LessonFullError,
    LessonNotFoundError,
    ParticipantInactiveError,
    ParticipantNotFoundError,
)
from courses.domain.policies import ENROLLMENT_TRANSITIONS, ensure_transition
from courses.services import fields
from courses.services.retry import RetryPolicy
from courses.stores.interfaces import LessonStore, ParticipantStore


class EnrollmentService:
    """Service for enrolling participants into lessons."""

    def __init__(
        self,
        lessons: LessonStore,
        participants: ParticipantStore,
        *,
        clock: Callable[[], datetime] = fields.utc_now,
        retry: RetryPolicy | None = None,
        allow_inactive_participant_enrollment: bool = False,
        enforce_status_transitions: bool = False,
    ) -> None:
        self._lessons = lessons
        self._participants = participants
        self._clock = clock
        self._retry = retry or RetryPolicy()
        self._allow_inactive = allow_inactive_participant_enrollment
        self._enforce_transitions = enforce_status_transitions

    def _require_lesson(self, lesson_id: LessonId) -> Lesson:
        lesson = self._lessons.get(lesson_id)
        if lesson is None:
            raise LessonNotFoundError(str(lesson_id))
        return lesson

    def enroll_participant(
        self, lesson_id: str, participant_id: str, notes: str | None = None
    ) -> Enrollment:
        """Enroll a participant with status enrolled and payment pending.

        Raises:
            LessonNotFoundError: If the lesson does not exist.
            ParticipantNotFoundError: If the participant does not exist.
            ParticipantInactiveError: If the participant is deactivated and
                inactive enrollment is not allowed.
            AlreadyEnrolledError: If the participant already has an enrollment.
            LessonFullError: If the lesson is at maximum capacity.
        """
        lid = fields.parse_id(LessonId, lesson_id, "lesson")
        pid = fields.parse_id(ParticipantId, participant_id, "participant")
        notes = fields.optional_text("notes", notes)

        def attempt() -> Enrollment:
            lesson = self._require_lesson(lid)
            participant = self._participants.get(pid)
            if participant is None:
                raise ParticipantNotFoundError(str(pid))
            if not participant.is_active and not self._allow_inactive:
                raise ParticipantInactiveError(str(pid))
            if lesson.enrollment_for(pid) is not None:
                raise AlreadyEnrolledError(str(lid), str(pid))
            if lesson.is_full:
                raise LessonFullError(str(lid), lesson.max_participants.value)

            now = self._clock()
            enrollment = Enrollment(
                id=EnrollmentId.generate(),
                lesson_id=lid,
                participant_id=pid,
                enrollment_date=now,
                notes=notes,
            )
            self._lessons.replace(
                lesson.with_enrollments((*lesson.enrollments, enrollment), now)
            )
            return enrollment

        return self._retry.run(attempt)

    def unenroll_participant(self, lesson_id: str, participant_id: str) -> None:
        """Remove a participant's enrollment; a no-op if there is none.

        Raises:
            LessonNotFoundError: If the lesson does not exist.
        """
        lid = fields.parse_id(LessonId, lesson_id, "lesson")
        pid = fields.parse_id(ParticipantId, participant_id, "participant")

        def attempt() -> None:
            lesson = self._require_lesson(lid)
            remaining = [e for e in lesson.enrollments if e.participant_id != pid]
            self._lessons.replace(lesson.with_enrollments(remaining, self._clock()))

        self._retry.run(attempt)

    def get_enrollments_for_lesson(self, lesson_id: str) -> tuple[Enrollment, ...]:
        """Return the lesson's enrollments, or nothing if the lesson is gone."""
        lesson = self._lessons.get(fields.parse_id(LessonId, lesson_id, "lesson"))
        return lesson.enrollments if lesson is not None else ()

    def get_enrollments_for_participant(
        self, participant_id: str
    ) -> list[ParticipantEnrollment]:
        """Return every enrollment of a participant with its lesson.

        No index exists on participants, so this walks all lessons.
        """
        pid = fields.parse_id(ParticipantId, participant_id, "participant")
        return [
            ParticipantEnrollment(lesson=lesson, enrollment=enrollment)
            for lesson in self._lessons.list_lessons()
            for enrollment in lesson.enrollments
            if enrollment.participant_id == pid
        ]

    def get_lesson_roster(self, lesson_id: str) -> LessonRoster | None:
        """Return a lesson with its enrolled participants resolved.

        Participants removed since they enrolled are left out.
        """
        lesson = self._lessons.get(fields.parse_id(LessonId, lesson_id, "lesson"))
        if lesson is None:
            return None
        participants = (
            self._participants.get(e.participant_id) for e in lesson.enrollments
        )
        return LessonRoster(
            lesson=lesson,
            participants=tuple(p for p in participants if p is not None),
        )

    def update_enrollment(
        self,
        lesson_id: str,
        participant_id: str,
        *,
        status: str | None = None,
        payment_status: str | None = None,
    ) -> Enrollment:
        """Change status and/or payment status in a single write.

        Fields left as None keep their stored value.

        Raises:
            InvalidFieldError: If neither field is given or a value is unknown.
            InvalidStatusTransitionError: If transitions are enforced and the
                status change is not allowed.
            LessonNotFoundError: If the lesson does not exist.
            EnrollmentNotFoundError: If the participant is not enrolled.
        """
        if status is None and payment_status is None:
            raise InvalidFieldError("status", "status or payment_status is required")
        changes = {}
        if status is not None:
            changes["status"] = fields.choice("status", EnrollmentStatus, status)
        if payment_status is not None:
            changes["payment_status"] = fields.choice(
                "payment_status", PaymentStatus, payment_status
            )

        def change(enrollment: Enrollment) -> Enrollment:
            if self._enforce_transitions and "status" in changes:
                ensure_transition(
                    ENROLLMENT_TRANSITIONS, enrollment.status, changes["status"]
                )
            return dataclasses.replace(enrollment, **changes)

        return self._modify_enrollment(lesson_id, participant_id, change)

    def update_enrollment_status(
        self, lesson_id: str, participant_id: str, status: str
    ) -> Enrollment:
        """Set the status of a participant's enrollment.

        Raises:
            InvalidFieldError: If status is not an enrollment status.
            InvalidStatusTransitionError: If transitions are enforced and the
                change is not allowed.
            LessonNotFoundError: If the lesson does not exist.
            EnrollmentNotFoundError: If the participant is not enrolled.
        """
        return self.update_enrollment(lesson_id, participant_id, status=status)

    def update_enrollment_payment_status(
        self, lesson_id: str, participant_id: str, payment_status: str
    ) -> Enrollment:
        """Set the payment status of a participant's enrollment."""
        return self.update_enrollment(
            lesson_id, participant_id, payment_status=payment_status
        )

    def _modify_enrollment(
        self,
        lesson_id: str,
        participant_id: str,
        change: Callable[[Enrollment], Enrollment],
    ) -> Enrollment:
        lid = fields.parse_id(LessonId, lesson_id, "lesson")
        pid = fields.parse_id(ParticipantId, participant_id, "participant")

        def attempt() -> Enrollment:
            lesson = self._require_lesson(lid)
            current = lesson.enrollment_for(pid)
            if current is None:
                raise EnrollmentNotFoundError(str(lid), str(pid))
            updated = change(current)
            enrollments = [updated if e.id == current.id else e for e in lesson.enrollments]
            self._lessons.replace(lesson.with_enrollments(enrollments, self._clock()))
            return updated

        return self._retry.run(attempt)
