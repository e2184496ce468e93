"""Django ORM implementation of the participant and lesson stores.

Rows are converted to domain models on the way out. Database failures are
wrapped in StoreError with the original exception chained.
"""

import dataclasses
import logging
from datetime import datetime
from functools import wraps

from django.db import DatabaseError, IntegrityError, connection, transaction
from django.db.models import F

from courses import models
from courses.domain import (
    Capacity,
    EmergencyContact,
    Enrollment,
    EnrollmentId,
    EnrollmentStatus,
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
    LessonNotFoundError,
    ParticipantNotFoundError,
    StoreError,
)
from courses.stores.interfaces import LessonStore, ParticipantStore

logger = logging.getLogger(__name__)


def _translate_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.error("Store operation %s failed: %s", func.__name__, exc)
            raise StoreError(func.__name__) from exc

    return wrapper


def _ping() -> None:
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")


def _raise_if_email_taken(participant: Participant, exc: IntegrityError) -> None:
    taken = (
        models.Participant.objects.filter(email=participant.email)
        .exclude(pk=participant.id.value)
        .exists()
    )
    if taken:
        raise DuplicateEmailError(participant.email) from exc


def participant_from_row(row: models.Participant) -> Participant:
    contact = row.emergency_contact
    return Participant(
        id=ParticipantId(row.id),
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        registration_date=row.registration_date,
        phone=row.phone,
        age=row.age,
        allergies=tuple(row.allergies or ()),
        dietary_restrictions=tuple(row.dietary_restrictions or ()),
        emergency_contact=EmergencyContact(**contact) if contact else None,
        is_active=row.is_active,
        version=row.version,
    )


def participant_columns(participant: Participant) -> dict:
    contact = participant.emergency_contact
    return {
        "first_name": participant.first_name,
        "last_name": participant.last_name,
        "email": participant.email,
        "phone": participant.phone,
        "age": participant.age,
        "allergies": list(participant.allergies),
        "dietary_restrictions": list(participant.dietary_restrictions),
        "emergency_contact": dataclasses.asdict(contact) if contact else None,
        "registration_date": participant.registration_date,
        "is_active": participant.is_active,
    }


def enrollment_to_json(enrollment: Enrollment) -> dict:
    return {
        "id": str(enrollment.id),
        "lesson_id": str(enrollment.lesson_id),
        "participant_id": str(enrollment.participant_id),
        "enrollment_date": enrollment.enrollment_date.isoformat(),
        "status": enrollment.status.value,
        "payment_status": enrollment.payment_status.value,
        "notes": enrollment.notes,
    }


def enrollment_from_json(data: dict) -> Enrollment:
    return Enrollment(
        id=EnrollmentId.from_string(data["id"]),
        lesson_id=LessonId.from_string(data["lesson_id"]),
        participant_id=ParticipantId.from_string(data["participant_id"]),
        enrollment_date=datetime.fromisoformat(data["enrollment_date"]),
        status=EnrollmentStatus(data["status"]),
        payment_status=PaymentStatus(data.get("payment_status") or "pending"),
        notes=data.get("notes"),
    )


def lesson_from_row(row: models.Lesson) -> Lesson:
    return Lesson(
        id=LessonId(row.id),
        title=row.title,
        description=row.description,
        skill_level=SkillLevel(row.skill_level),
        duration=row.duration,
        max_participants=Capacity(row.max_participants),
        price=Money(row.price),
        date_time=row.date_time,
        created_at=row.created_at,
        updated_at=row.updated_at,
        location=row.location,
        instructor=row.instructor,
        ingredients=tuple(row.ingredients or ()),
        equipment=tuple(row.equipment or ()),
        techniques=tuple(row.techniques or ()),
        status=LessonStatus(row.status),
        enrollments=tuple(enrollment_from_json(e) for e in row.enrollments or ()),
        version=row.version,
    )


def lesson_columns(lesson: Lesson) -> dict:
    return {
        "title": lesson.title,
        "description": lesson.description,
        "skill_level": lesson.skill_level.value,
        "duration": lesson.duration,
        "max_participants": lesson.max_participants.value,
        "price": lesson.price.amount,
        "date_time": lesson.date_time,
        "location": lesson.location,
        "instructor": lesson.instructor,
        "ingredients": list(lesson.ingredients),
        "equipment": list(lesson.equipment),
        "techniques": list(lesson.techniques),
        "status": lesson.status.value,
        "enrollments": [enrollment_to_json(e) for e in lesson.enrollments],
        "created_at": lesson.created_at,
        "updated_at": lesson.updated_at,
    }


class DjangoParticipantStore(ParticipantStore):
    """Relational participant store using Django ORM."""

    @_translate_errors
    def create(self, participant: Participant) -> Participant:
        try:
            with transaction.atomic():
                row = models.Participant.objects.create(
                    id=participant.id.value,
                    version=0,
                    **participant_columns(participant),
                )
        except IntegrityError as exc:
            _raise_if_email_taken(participant, exc)
            raise
        return participant_from_row(row)

    @_translate_errors
    def get(self, participant_id: ParticipantId) -> Participant | None:
        row = models.Participant.objects.filter(pk=participant_id.value).first()
        return participant_from_row(row) if row is not None else None

    @_translate_errors
    def replace(self, participant: Participant) -> Participant:
        try:
            with transaction.atomic():
                matched = models.Participant.objects.filter(
                    pk=participant.id.value, version=participant.version
                ).update(version=F("version") + 1, **participant_columns(participant))
        except IntegrityError as exc:
            _raise_if_email_taken(participant, exc)
            raise
        if not matched:
            if not models.Participant.objects.filter(pk=participant.id.value).exists():
                raise ParticipantNotFoundError(str(participant.id))
            logger.warning("Participant %s changed since it was read", participant.id)
            raise ConcurrentModificationError("participant", str(participant.id))
        return dataclasses.replace(participant, version=participant.version + 1)

    @_translate_errors
    def delete(self, participant_id: ParticipantId) -> bool:
        deleted, _ = models.Participant.objects.filter(pk=participant_id.value).delete()
        return deleted > 0

    @_translate_errors
    def list_active(self) -> list[Participant]:
        rows = models.Participant.objects.filter(is_active=True).order_by(
            "-registration_date"
        )
        return [participant_from_row(row) for row in rows]

    @_translate_errors
    def ping(self) -> None:
        _ping()


class DjangoLessonStore(LessonStore):
    """Relational lesson store using Django ORM, enrollments held as JSON."""

    @_translate_errors
    def create(self, lesson: Lesson) -> Lesson:
        row = models.Lesson.objects.create(
            id=lesson.id.value, version=0, **lesson_columns(lesson)
        )
        return lesson_from_row(row)

    @_translate_errors
    def get(self, lesson_id: LessonId) -> Lesson | None:
        row = models.Lesson.objects.filter(pk=lesson_id.value).first()
        return lesson_from_row(row) if row is not None else None

    @_translate_errors
    def replace(self, lesson: Lesson) -> Lesson:
        matched = models.Lesson.objects.filter(
            pk=lesson.id.value, version=lesson.version
        ).update(version=F("version") + 1, **lesson_columns(lesson))
        if not matched:
            if not models.Lesson.objects.filter(pk=lesson.id.value).exists():
                raise LessonNotFoundError(str(lesson.id))
            logger.warning("Lesson %s changed since it was read", lesson.id)
            raise ConcurrentModificationError("lesson", str(lesson.id))
        return dataclasses.replace(lesson, version=lesson.version + 1)

    @_translate_errors
    def delete(self, lesson_id: LessonId, expected_version: int | None = None) -> bool:
        rows = models.Lesson.objects.filter(pk=lesson_id.value)
        if expected_version is not None:
            rows = rows.filter(version=expected_version)
        deleted, _ = rows.delete()
        if deleted:
            return True
        if (
            expected_version is not None
            and models.Lesson.objects.filter(pk=lesson_id.value).exists()
        ):
            logger.warning("Lesson %s changed before it could be deleted", lesson_id)
            raise ConcurrentModificationError("lesson", str(lesson_id))
        return False

    @_translate_errors
    def list_lessons(self, status: LessonStatus | None = None) -> list[Lesson]:
        rows = models.Lesson.objects.order_by("date_time")
        if status is not None:
            rows = rows.filter(status=status.value)
        return [lesson_from_row(row) for row in rows]

    @_translate_errors
    def ping(self) -> None:
        _ping()
