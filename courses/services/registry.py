"""Wiring of services to their stores.

The process bootstrap builds one CourseServices and hands it to whatever
needs it; nothing here is a module-level singleton.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Self

from courses.services import fields
from courses.services.enrollment_service import EnrollmentService
from courses.services.lesson_service import LessonService
from courses.services.participant_service import ParticipantService
from courses.services.retry import RetryPolicy
from courses.stores.interfaces import LessonStore, ParticipantStore


@dataclass(frozen=True)
class CourseOptions:
    """Business switches read from the COURSES setting."""

    allow_inactive_participant_enrollment: bool = False
    enforce_status_transitions: bool = False
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> Self:
        return cls(
            allow_inactive_participant_enrollment=bool(
                config.get("ALLOW_INACTIVE_PARTICIPANT_ENROLLMENT", False)
            ),
            enforce_status_transitions=bool(
                config.get("ENFORCE_STATUS_TRANSITIONS", False)
            ),
            retry=RetryPolicy(
                attempts=int(config.get("WRITE_RETRY_ATTEMPTS", 3)),
                delay=float(config.get("WRITE_RETRY_DELAY", 0.05)),
                backoff_factor=float(config.get("WRITE_RETRY_BACKOFF_FACTOR", 2.0)),
            ),
        )


@dataclass(frozen=True)
class CourseServices:
    participants: ParticipantService
    lessons: LessonService
    enrollments: EnrollmentService

    @classmethod
    def build(
        cls,
        participant_store: ParticipantStore,
        lesson_store: LessonStore,
        options: CourseOptions | None = None,
        clock: Callable[[], datetime] = fields.utc_now,
    ) -> Self:
        options = options or CourseOptions()
        return cls(
            participants=ParticipantService(
                participant_store, clock=clock, retry=options.retry
            ),
            lessons=LessonService(
                lesson_store,
                clock=clock,
                retry=options.retry,
                enforce_status_transitions=options.enforce_status_transitions,
            ),
            enrollments=EnrollmentService(
                lesson_store,
                participant_store,
                clock=clock,
                retry=options.retry,
                allow_inactive_participant_enrollment=(
                    options.allow_inactive_participant_enrollment
                ),
                enforce_status_transitions=options.enforce_status_transitions,
            ),
        )

    def check_connection(self) -> None:
        """Raise StoreError if either store is unreachable."""
        self.participants.check_connection()
        self.lessons.check_connection()
