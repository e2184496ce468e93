"""Integration tests for the Django ORM stores.

Run with: pytest tests/test_django_store.py -v
"""

import dataclasses
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError, IntegrityError

from courses import models
from courses.domain import (
    Capacity,
    EmergencyContact,
    Enrollment,
    EnrollmentId,
    Lesson,
    LessonId,
    LessonStatus,
    Money,
    Participant,
    ParticipantId,
    PaymentStatus,
    SkillLevel,
)
from courses.domain.errors import (
    ConcurrentModificationError,
    DuplicateEmailError,
    InvalidFieldError,
    LessonNotFoundError,
    StoreError,
)
from courses.services import CourseOptions, CourseServices, RetryPolicy
from courses.stores.django_store import DjangoLessonStore, DjangoParticipantStore

NOW = datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc)


def make_participant(email: str = "ada@example.com") -> Participant:
    return Participant(
        id=ParticipantId.generate(),
        first_name="Ada",
        last_name="Baker",
        email=email,
        registration_date=NOW,
        allergies=("walnuts",),
        emergency_contact=EmergencyContact(name="Bo", phone="1", relationship="friend"),
    )


def make_lesson(**overrides) -> Lesson:
    values = {
        "id": LessonId.generate(),
        "title": "Croissants",
        "description": "Lamination from scratch",
        "skill_level": SkillLevel.INTERMEDIATE,
        "duration": 240,
        "max_participants": Capacity(6),
        "price": Money(Decimal("95.50")),
        "date_time": NOW + timedelta(days=10),
        "created_at": NOW,
        "updated_at": NOW,
        "equipment": ("rolling pin",),
    }
    values.update(overrides)
    return Lesson(**values)


@pytest.mark.django_db
class TestDjangoParticipantStore:
    """Tests for DjangoParticipantStore."""

    def test_create_and_get(self):
        """A created participant reads back unchanged."""
        store = DjangoParticipantStore()
        participant = make_participant()

        created = store.create(participant)

        assert created == participant
        assert store.get(participant.id) == participant

    def test_duplicate_email_is_rejected(self):
        """The email column is unique."""
        store = DjangoParticipantStore()
        store.create(make_participant())

        with pytest.raises(DuplicateEmailError):
            store.create(make_participant())
        assert models.Participant.objects.count() == 1

    def test_replace_bumps_version(self):
        """A replace with the current version succeeds and bumps it."""
        store = DjangoParticipantStore()
        created = store.create(make_participant())

        replaced = store.replace(dataclasses.replace(created, is_active=False))

        assert replaced.version == 1
        assert store.get(created.id).is_active is False

    def test_stale_replace_conflicts(self):
        """Replacing from an outdated read raises ConcurrentModificationError."""
        store = DjangoParticipantStore()
        created = store.create(make_participant())
        store.replace(dataclasses.replace(created, age=30))

        with pytest.raises(ConcurrentModificationError):
            store.replace(dataclasses.replace(created, age=40))
        assert store.get(created.id).age == 30

    def test_list_active_skips_inactive(self):
        """Deactivated participants are not listed."""
        store = DjangoParticipantStore()
        active = store.create(make_participant())
        inactive = store.create(
            dataclasses.replace(make_participant("bea@example.com"), is_active=False)
        )

        listed = [p.id for p in store.list_active()]

        assert active.id in listed
        assert inactive.id not in listed

    def test_delete(self):
        """delete reports whether a row was removed."""
        store = DjangoParticipantStore()
        created = store.create(make_participant())

        assert store.delete(created.id) is True
        assert store.delete(created.id) is False

    def test_database_failures_become_store_errors(self):
        """Driver errors are wrapped in StoreError with the cause chained."""
        store = DjangoParticipantStore()
        with mock.patch.object(
            models.Participant.objects, "filter", side_effect=DatabaseError("gone")
        ):
            with pytest.raises(StoreError) as excinfo:
                store.get(ParticipantId.generate())
        assert isinstance(excinfo.value.__cause__, DatabaseError)

    def test_other_integrity_errors_are_store_errors(self):
        """Only a taken email is reported as a duplicate."""
        store = DjangoParticipantStore()
        with mock.patch.object(
            models.Participant.objects,
            "create",
            side_effect=IntegrityError("NOT NULL constraint failed: first_name"),
        ):
            with pytest.raises(StoreError) as excinfo:
                store.create(make_participant())
        assert isinstance(excinfo.value.__cause__, IntegrityError)
        assert models.Participant.objects.count() == 0


@pytest.mark.django_db
class TestDjangoLessonStore:
    """Tests for DjangoLessonStore."""

    def test_embedded_enrollments_round_trip(self):
        """Enrollments stored in the lesson row read back unchanged."""
        store = DjangoLessonStore()
        lesson = store.create(make_lesson())
        enrollment = Enrollment(
            id=EnrollmentId.generate(),
            lesson_id=lesson.id,
            participant_id=ParticipantId.generate(),
            enrollment_date=NOW,
            payment_status=PaymentStatus.PAID,
            notes="Gluten free",
        )

        store.replace(lesson.with_enrollments([enrollment], NOW + timedelta(minutes=5)))
        fetched = store.get(lesson.id)

        assert fetched.enrollments == (enrollment,)
        assert fetched.updated_at == NOW + timedelta(minutes=5)
        assert fetched.price == Money(Decimal("95.50"))
        assert fetched.equipment == ("rolling pin",)
        assert fetched.version == 1

    def test_stale_replace_conflicts(self):
        """Two writers from the same read cannot both win."""
        store = DjangoLessonStore()
        lesson = store.create(make_lesson())
        store.replace(dataclasses.replace(lesson, title="Croissants I"))

        with pytest.raises(ConcurrentModificationError):
            store.replace(dataclasses.replace(lesson, title="Croissants II"))
        assert store.get(lesson.id).title == "Croissants I"

    def test_replace_missing_lesson(self):
        """Replacing a lesson that was never stored raises LessonNotFoundError."""
        with pytest.raises(LessonNotFoundError):
            DjangoLessonStore().replace(make_lesson())

    def test_list_by_status_in_date_order(self):
        """Lessons are filtered by status and ordered by date."""
        store = DjangoLessonStore()
        late = store.create(make_lesson(date_time=NOW + timedelta(days=20)))
        early = store.create(make_lesson(date_time=NOW + timedelta(days=2)))
        store.create(make_lesson(status=LessonStatus.CANCELLED))

        scheduled = store.list_lessons(LessonStatus.SCHEDULED)

        assert [lesson.id for lesson in scheduled] == [early.id, late.id]
        assert len(store.list_lessons()) == 3

    def test_delete_with_stale_version_conflicts(self):
        """A delete guarded by an old version does not remove a changed lesson."""
        store = DjangoLessonStore()
        lesson = store.create(make_lesson())
        store.replace(dataclasses.replace(lesson, title="Changed"))

        with pytest.raises(ConcurrentModificationError):
            store.delete(lesson.id, expected_version=lesson.version)
        assert store.delete(lesson.id, expected_version=1) is True
        assert store.delete(lesson.id) is False

    def test_ping(self):
        """ping succeeds against the test database."""
        DjangoLessonStore().ping()


@pytest.mark.django_db
class TestLessonPricesInDatabase:
    """Tests for lesson prices written through the services to the price column."""

    @pytest.fixture
    def services(self, clock) -> CourseServices:
        return CourseServices.build(
            DjangoParticipantStore(),
            DjangoLessonStore(),
            CourseOptions(retry=RetryPolicy(delay=0)),
            clock=clock,
        )

    def test_price_reads_back_as_written(self, services, lesson_values):
        """A price with cents is stored without rounding."""
        created = services.lessons.create_lesson(**lesson_values(price="45.5"))

        assert created.price.amount == Decimal("45.50")
        assert services.lessons.get_lesson(str(created.id)) == created

    @pytest.mark.parametrize("price", ["45.999", "100000000", "0.001"])
    def test_price_that_does_not_fit_is_rejected(self, services, lesson_values, price):
        """Prices the column would round or overflow raise InvalidFieldError."""
        with pytest.raises(InvalidFieldError) as excinfo:
            services.lessons.create_lesson(**lesson_values(price=price))
        assert excinfo.value.field == "price"
        assert models.Lesson.objects.count() == 0
