"""Unit tests for EnrollmentService.

These cover capacity, duplicate checks, inactive participants, status
workflows and retrying after a lost version race.
Run with: pytest tests/test_enrollments.py -v
"""

import dataclasses

import pytest

from courses.domain import EnrollmentStatus, PaymentStatus
from courses.domain.errors import (
    AlreadyEnrolledError,
    ConcurrentModificationError,
    EnrollmentNotFoundError,
    InvalidFieldError,
    InvalidStatusTransitionError,
    LessonFullError,
    LessonNotFoundError,
    ParticipantInactiveError,
    ParticipantNotFoundError,
)
from courses.services import CourseOptions, CourseServices, RetryPolicy
from courses.stores import InMemoryLessonStore

MISSING_ID = "6f1c2a52-7f4e-4d4c-9a57-0d6c1c3b9a10"


class RacingLessonStore(InMemoryLessonStore):
    """Lesson store where another writer sneaks in before the next replace."""

    def __init__(self) -> None:
        super().__init__()
        self.races = 0
        self.replace_calls = 0

    def replace(self, lesson):
        self.replace_calls += 1
        if self.races:
            self.races -= 1
            current = self.get(lesson.id)
            # Bump the stored version the way a concurrent writer would.
            super().replace(dataclasses.replace(current, title=current.title))
        return super().replace(lesson)


@pytest.fixture
def lesson(services, lesson_values):
    return services.lessons.create_lesson(**lesson_values(max_participants=2))


@pytest.fixture
def enroll_new(services, participant_values):
    """Register a fresh participant and enroll them into a lesson."""
    counter = iter(range(1000))

    def enroll(lesson, **kwargs):
        participant = services.participants.create_participant(
            **participant_values(email=f"baker{next(counter)}@example.com")
        )
        return services.enrollments.enroll_participant(
            str(lesson.id), str(participant.id), **kwargs
        )

    return enroll


def build_services(participant_store, lesson_store, clock, **options):
    return CourseServices.build(
        participant_store,
        lesson_store,
        CourseOptions(retry=RetryPolicy(delay=0), **options),
        clock=clock,
    )


class TestEnrollParticipant:
    """Tests for enroll_participant."""

    def test_enroll_appends_pending_enrollment(self, services, lesson, enroll_new):
        """A new enrollment is enrolled, pending payment and stored on the lesson."""
        enrollment = enroll_new(lesson, notes="Bringing my own apron")

        assert enrollment.status is EnrollmentStatus.ENROLLED
        assert enrollment.payment_status is PaymentStatus.PENDING
        assert enrollment.notes == "Bringing my own apron"
        stored = services.lessons.get_lesson(str(lesson.id))
        assert stored.enrollments == (enrollment,)
        assert stored.updated_at > lesson.updated_at

    def test_capacity_is_enforced(self, services, lesson_values, enroll_new):
        """The lesson accepts exactly max_participants enrollments."""
        lesson = services.lessons.create_lesson(**lesson_values(max_participants=3))
        for _ in range(3):
            enroll_new(lesson)

        with pytest.raises(LessonFullError) as excinfo:
            enroll_new(lesson)
        assert excinfo.value.capacity == 3
        assert len(services.lessons.get_lesson(str(lesson.id)).enrollments) == 3

    def test_single_seat_lesson(self, services, lesson_values, enroll_new):
        """The second participant of a one-seat lesson is turned away."""
        lesson = services.lessons.create_lesson(**lesson_values(max_participants=1))

        first = enroll_new(lesson)
        assert first.status is EnrollmentStatus.ENROLLED
        with pytest.raises(LessonFullError):
            enroll_new(lesson)

    def test_cancelled_enrollment_frees_a_seat(self, services, lesson_values, enroll_new):
        """Only enrolled entries count toward capacity."""
        lesson = services.lessons.create_lesson(**lesson_values(max_participants=1))
        first = enroll_new(lesson)
        services.enrollments.update_enrollment_status(
            str(lesson.id), str(first.participant_id), "cancelled"
        )

        second = enroll_new(lesson)
        assert second.status is EnrollmentStatus.ENROLLED

    def test_duplicate_enrollment_conflicts(self, services, lesson, participant_values):
        """Enrolling the same participant twice fails the second time."""
        participant = services.participants.create_participant(**participant_values())
        services.enrollments.enroll_participant(str(lesson.id), str(participant.id))

        with pytest.raises(AlreadyEnrolledError):
            services.enrollments.enroll_participant(str(lesson.id), str(participant.id))

    def test_unknown_lesson(self, services, participant_values):
        """Enrolling into a missing lesson raises LessonNotFoundError."""
        participant = services.participants.create_participant(**participant_values())
        with pytest.raises(LessonNotFoundError):
            services.enrollments.enroll_participant(MISSING_ID, str(participant.id))

    def test_unknown_participant(self, services, lesson):
        """Enrolling a missing participant raises ParticipantNotFoundError."""
        with pytest.raises(ParticipantNotFoundError):
            services.enrollments.enroll_participant(str(lesson.id), MISSING_ID)

    def test_inactive_participant_rejected_by_default(
        self, services, lesson, participant_values
    ):
        """A soft-deleted participant cannot enroll."""
        participant = services.participants.create_participant(**participant_values())
        services.participants.delete_participant(str(participant.id))

        with pytest.raises(ParticipantInactiveError):
            services.enrollments.enroll_participant(str(lesson.id), str(participant.id))

    def test_inactive_participant_allowed_when_configured(
        self, participant_store, lesson_store, clock, lesson_values, participant_values
    ):
        """The inactive check can be switched off."""
        services = build_services(
            participant_store,
            lesson_store,
            clock,
            allow_inactive_participant_enrollment=True,
        )
        lesson = services.lessons.create_lesson(**lesson_values())
        participant = services.participants.create_participant(**participant_values())
        services.participants.delete_participant(str(participant.id))

        enrollment = services.enrollments.enroll_participant(
            str(lesson.id), str(participant.id)
        )
        assert enrollment.participant_id == participant.id


class TestUnenrollParticipant:
    """Tests for unenroll_participant."""

    def test_unenroll_twice_succeeds(self, services, lesson, enroll_new):
        """Unenrolling is idempotent."""
        kept = enroll_new(lesson)
        removed = enroll_new(lesson)

        services.enrollments.unenroll_participant(str(lesson.id), str(removed.participant_id))
        services.enrollments.unenroll_participant(str(lesson.id), str(removed.participant_id))

        enrollments = services.enrollments.get_enrollments_for_lesson(str(lesson.id))
        assert enrollments == (kept,)

    def test_unenroll_from_missing_lesson(self, services):
        """Unenrolling from an unknown lesson raises LessonNotFoundError."""
        with pytest.raises(LessonNotFoundError):
            services.enrollments.unenroll_participant(MISSING_ID, MISSING_ID)


class TestEnrollmentQueries:
    """Tests for the enrollment read operations."""

    def test_enrollments_for_missing_lesson_are_empty(self, services):
        """An unknown lesson has no enrollments."""
        assert services.enrollments.get_enrollments_for_lesson(MISSING_ID) == ()

    def test_enrollments_for_participant(
        self, services, lesson_values, participant_values
    ):
        """A participant's enrollments are gathered across lessons."""
        participant = services.participants.create_participant(**participant_values())
        first = services.lessons.create_lesson(**lesson_values(title="Scones"))
        second = services.lessons.create_lesson(**lesson_values(title="Brioche"))
        services.lessons.create_lesson(**lesson_values(title="Pretzels"))
        for lesson in (first, second):
            services.enrollments.enroll_participant(str(lesson.id), str(participant.id))

        items = services.enrollments.get_enrollments_for_participant(str(participant.id))

        assert sorted(item.lesson.title for item in items) == ["Brioche", "Scones"]
        assert all(item.enrollment.participant_id == participant.id for item in items)

    def test_roster_resolves_participants(self, services, lesson, participant_values):
        """The roster lists enrolled participants and skips removed ones."""
        staying = services.participants.create_participant(**participant_values())
        leaving = services.participants.create_participant(
            **participant_values(email="leaving@example.com")
        )
        for participant in (staying, leaving):
            services.enrollments.enroll_participant(str(lesson.id), str(participant.id))
        services.participants.hard_delete_participant(str(leaving.id))

        roster = services.enrollments.get_lesson_roster(str(lesson.id))

        assert roster.lesson.id == lesson.id
        assert [p.id for p in roster.participants] == [staying.id]
        assert services.enrollments.get_lesson_roster(MISSING_ID) is None


class TestEnrollmentUpdates:
    """Tests for status and payment status changes."""

    def test_status_update_changes_only_status(self, services, lesson, enroll_new):
        """Completing an enrollment leaves its other fields intact."""
        original = enroll_new(lesson, notes="Vegan butter please")

        services.enrollments.update_enrollment_status(
            str(lesson.id), str(original.participant_id), "completed"
        )

        (stored,) = services.enrollments.get_enrollments_for_lesson(str(lesson.id))
        assert stored.status is EnrollmentStatus.COMPLETED
        assert dataclasses.replace(stored, status=original.status) == original

    def test_payment_status_update(self, services, lesson, enroll_new):
        """Payment status changes independently of status."""
        original = enroll_new(lesson)

        updated = services.enrollments.update_enrollment_payment_status(
            str(lesson.id), str(original.participant_id), "paid"
        )

        assert updated.payment_status is PaymentStatus.PAID
        assert updated.status is EnrollmentStatus.ENROLLED

    def test_update_requires_existing_enrollment(self, services, lesson):
        """Changing a missing enrollment raises EnrollmentNotFoundError."""
        with pytest.raises(EnrollmentNotFoundError):
            services.enrollments.update_enrollment_status(
                str(lesson.id), MISSING_ID, "completed"
            )

    def test_update_rejects_unknown_status(self, services, lesson, enroll_new):
        """Unknown statuses raise InvalidFieldError."""
        original = enroll_new(lesson)
        with pytest.raises(InvalidFieldError):
            services.enrollments.update_enrollment_status(
                str(lesson.id), str(original.participant_id), "waitlisted"
            )

    def test_cancelled_enrollment_can_be_reopened_by_default(
        self, services, lesson, enroll_new
    ):
        """Without enforcement any status change is accepted."""
        original = enroll_new(lesson)
        pid = str(original.participant_id)
        services.enrollments.update_enrollment_status(str(lesson.id), pid, "cancelled")

        reopened = services.enrollments.update_enrollment_status(
            str(lesson.id), pid, "enrolled"
        )
        assert reopened.status is EnrollmentStatus.ENROLLED

    def test_enforced_transitions_block_reopening(
        self, participant_store, lesson_store, clock, lesson_values, participant_values
    ):
        """With enforcement on, cancelled enrollments stay cancelled."""
        services = build_services(
            participant_store, lesson_store, clock, enforce_status_transitions=True
        )
        lesson = services.lessons.create_lesson(**lesson_values())
        participant = services.participants.create_participant(**participant_values())
        services.enrollments.enroll_participant(str(lesson.id), str(participant.id))
        services.enrollments.update_enrollment_status(
            str(lesson.id), str(participant.id), "cancelled"
        )

        with pytest.raises(InvalidStatusTransitionError):
            services.enrollments.update_enrollment_status(
                str(lesson.id), str(participant.id), "enrolled"
            )

    def test_update_both_fields_in_one_write(
        self, participant_store, clock, lesson_values, participant_values
    ):
        """Status and payment status land together in a single replace."""
        lesson_store = RacingLessonStore()
        services = build_services(participant_store, lesson_store, clock)
        lesson = services.lessons.create_lesson(**lesson_values())
        participant = services.participants.create_participant(**participant_values())
        services.enrollments.enroll_participant(str(lesson.id), str(participant.id))
        writes_before = lesson_store.replace_calls

        updated = services.enrollments.update_enrollment(
            str(lesson.id), str(participant.id), status="completed", payment_status="paid"
        )

        assert lesson_store.replace_calls == writes_before + 1
        assert updated.status is EnrollmentStatus.COMPLETED
        assert updated.payment_status is PaymentStatus.PAID
        (stored,) = services.enrollments.get_enrollments_for_lesson(str(lesson.id))
        assert stored == updated

    def test_update_requires_a_field(self, services, lesson, enroll_new):
        """Calling update_enrollment with nothing to change is rejected."""
        original = enroll_new(lesson)
        with pytest.raises(InvalidFieldError):
            services.enrollments.update_enrollment(
                str(lesson.id), str(original.participant_id)
            )

    def test_rejected_transition_leaves_payment_untouched(
        self, participant_store, lesson_store, clock, lesson_values, participant_values
    ):
        """A refused status change also discards the payment change."""
        services = build_services(
            participant_store, lesson_store, clock, enforce_status_transitions=True
        )
        lesson = services.lessons.create_lesson(**lesson_values())
        participant = services.participants.create_participant(**participant_values())
        services.enrollments.enroll_participant(str(lesson.id), str(participant.id))
        services.enrollments.update_enrollment_status(
            str(lesson.id), str(participant.id), "cancelled"
        )

        with pytest.raises(InvalidStatusTransitionError):
            services.enrollments.update_enrollment(
                str(lesson.id), str(participant.id), status="enrolled", payment_status="paid"
            )

        (stored,) = services.enrollments.get_enrollments_for_lesson(str(lesson.id))
        assert stored.status is EnrollmentStatus.CANCELLED
        assert stored.payment_status is PaymentStatus.PENDING


class TestConcurrentWrites:
    """Tests for retrying after a conditional replace loses."""

    @pytest.fixture
    def racing_store(self) -> RacingLessonStore:
        return RacingLessonStore()

    def test_enroll_retries_after_conflict(
        self, participant_store, racing_store, clock, lesson_values, participant_values
    ):
        """A lost race re-runs the enrollment against fresh data."""
        services = build_services(participant_store, racing_store, clock)
        lesson = services.lessons.create_lesson(**lesson_values())
        participant = services.participants.create_participant(**participant_values())
        racing_store.races = 1

        enrollment = services.enrollments.enroll_participant(
            str(lesson.id), str(participant.id)
        )

        stored = services.lessons.get_lesson(str(lesson.id))
        assert stored.enrollments == (enrollment,)
        assert racing_store.replace_calls == 2

    def test_conflict_surfaces_when_retries_run_out(
        self, participant_store, racing_store, clock, lesson_values, participant_values
    ):
        """Persistent conflicts propagate as ConcurrentModificationError."""
        services = build_services(participant_store, racing_store, clock)
        lesson = services.lessons.create_lesson(**lesson_values())
        participant = services.participants.create_participant(**participant_values())
        racing_store.races = 10

        with pytest.raises(ConcurrentModificationError):
            services.enrollments.enroll_participant(str(lesson.id), str(participant.id))
        assert services.lessons.get_lesson(str(lesson.id)).enrollments == ()
