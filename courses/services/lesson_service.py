"""Lesson service - scheduling business logic.

The service owns id, created_at, updated_at, enrollments and version;
callers never set them directly.
"""

import dataclasses
from collections.abc import Callable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from courses.domain import Capacity, Lesson, LessonId, LessonStatus, Money, SkillLevel
from courses.domain.errors import (
    InvalidFieldError,
    LessonHasActiveEnrollmentsError,
    LessonNotFoundError,
)
from courses.domain.policies import LESSON_TRANSITIONS, ensure_transition
from courses.services import fields
from courses.services.retry import RetryPolicy
from courses.stores.interfaces import LessonStore

REQUIRED_FIELDS = (
    "title",
    "description",
    "skill_level",
    "duration",
    "max_participants",
    "price",
    "date_time",
)
UPDATABLE_FIELDS = frozenset(
    {
        *REQUIRED_FIELDS,
        "location",
        "instructor",
        "ingredients",
        "equipment",
        "techniques",
        "status",
    }
)
MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at", "enrollments", "version"})

# Matches the price column: 10 digits, 2 of them after the point.
CENT = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")


def _capacity(value: Any) -> Capacity:
    return Capacity(fields.integer("max_participants", value, minimum=1))


def _money(value: Any) -> Money:
    amount = fields.decimal("price", value)
    if amount > MAX_PRICE:
        raise InvalidFieldError("price", f"must be at most {MAX_PRICE}")
    if amount != amount.quantize(CENT):
        raise InvalidFieldError("price", "must have at most 2 decimal places")
    try:
        return Money(amount.quantize(CENT))
    except ValueError as exc:
        raise InvalidFieldError("price", str(exc)) from None


def _clean(values: Mapping[str, Any]) -> dict[str, Any]:
    cleaners: dict[str, Callable[[Any], Any]] = {
        "title": lambda v: fields.text("title", v),
        "description": lambda v: fields.text("description", v),
        "skill_level": lambda v: fields.choice("skill_level", SkillLevel, v),
        "duration": lambda v: fields.integer("duration", v, minimum=1),
        "max_participants": _capacity,
        "price": _money,
        "date_time": lambda v: fields.moment("date_time", v),
        "location": lambda v: fields.optional_text("location", v, empty=""),
        "instructor": lambda v: fields.optional_text("instructor", v, empty=""),
        "ingredients": lambda v: fields.string_tuple("ingredients", v),
        "equipment": lambda v: fields.string_tuple("equipment", v),
        "techniques": lambda v: fields.string_tuple("techniques", v),
        "status": lambda v: fields.choice("status", LessonStatus, v),
    }
    return {name: cleaners[name](value) for name, value in values.items()}


class LessonService:
    """Service for lesson operations."""

    def __init__(
        self,
        store: LessonStore,
        *,
        clock: Callable[[], datetime] = fields.utc_now,
        retry: RetryPolicy | None = None,
        enforce_status_transitions: bool = False,
    ) -> None:
        self._store = store
        self._clock = clock
        self._retry = retry or RetryPolicy()
        self._enforce_transitions = enforce_status_transitions

    def create_lesson(self, **values: Any) -> Lesson:
        """Schedule a lesson under a fresh ID with no enrollments.

        Raises:
            InvalidFieldError: If a field is missing, unknown or malformed.
        """
        values = {k: v for k, v in values.items() if k not in MANAGED_FIELDS}
        fields.reject_unknown(values, UPDATABLE_FIELDS)
        fields.require_present(values, REQUIRED_FIELDS)
        now = self._clock()
        lesson = Lesson(
            id=LessonId.generate(),
            created_at=now,
            updated_at=now,
            **_clean(values),
        )
        return self._store.create(lesson)

    def get_lesson(self, lesson_id: str) -> Lesson | None:
        """Return a lesson by ID, or None if it does not exist.

        Raises:
            InvalidIdError: If the lesson_id is not a valid UUID.
        """
        return self._store.get(fields.parse_id(LessonId, lesson_id, "lesson"))

    def get_all_lessons(self) -> list[Lesson]:
        """Return all lessons, soonest first."""
        return self._store.list_lessons()

    def get_lessons_by_status(self, status: str) -> list[Lesson]:
        """Return lessons with the given status, soonest first.

        Raises:
            InvalidFieldError: If status is not a lesson status.
        """
        return self._store.list_lessons(fields.choice("status", LessonStatus, status))

    def update_lesson(self, lesson_id: str, **changes: Any) -> Lesson:
        """Merge the given fields over the stored lesson and refresh updated_at.

        Raises:
            InvalidIdError: If the lesson_id is not a valid UUID.
            InvalidFieldError: If a field is unknown, managed or malformed.
            InvalidStatusTransitionError: If transitions are enforced and the
                status change is not allowed.
            LessonNotFoundError: If the lesson does not exist.
        """
        lid = fields.parse_id(LessonId, lesson_id, "lesson")
        fields.reject_unknown(changes, UPDATABLE_FIELDS)
        cleaned = _clean(changes)

        def attempt() -> Lesson:
            existing = self._store.get(lid)
            if existing is None:
                raise LessonNotFoundError(str(lid))
            if self._enforce_transitions and "status" in cleaned:
                ensure_transition(LESSON_TRANSITIONS, existing.status, cleaned["status"])
            updated = dataclasses.replace(existing, **cleaned, updated_at=self._clock())
            return self._store.replace(updated)

        return self._retry.run(attempt)

    def delete_lesson(self, lesson_id: str, force: bool = False) -> None:
        """Remove a lesson together with its enrollments.

        Lessons with enrolled participants are only removed when force is set.

        Raises:
            LessonNotFoundError: If the lesson does not exist.
            LessonHasActiveEnrollmentsError: If participants are still enrolled
                and force is not set.
        """
        lid = fields.parse_id(LessonId, lesson_id, "lesson")

        def attempt() -> None:
            existing = self._store.get(lid)
            if existing is None:
                raise LessonNotFoundError(str(lid))
            if not force and existing.active_enrollment_count:
                raise LessonHasActiveEnrollmentsError(
                    str(lid), existing.active_enrollment_count
                )
            if not self._store.delete(lid, expected_version=existing.version):
                raise LessonNotFoundError(str(lid))

        self._retry.run(attempt)

    def check_connection(self) -> None:
        self._store.ping()
