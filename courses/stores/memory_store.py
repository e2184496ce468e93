"""In-process stores keeping domain models in dictionaries.

Used by the service tests and handy for local experiments; they honour the
same version checks as the Django stores.
"""

import dataclasses
from threading import Lock

from courses.domain import Lesson, LessonId, LessonStatus, Participant, ParticipantId
from courses.domain.errors import (
    ConcurrentModificationError,
    DuplicateEmailError,
    LessonNotFoundError,
    ParticipantNotFoundError,
)
from courses.stores.interfaces import LessonStore, ParticipantStore


class InMemoryParticipantStore(ParticipantStore):
    def __init__(self) -> None:
        self._records: dict[ParticipantId, Participant] = {}
        self._lock = Lock()

    def _ensure_unique_email(self, participant: Participant) -> None:
        for other in self._records.values():
            if other.id != participant.id and other.email == participant.email:
                raise DuplicateEmailError(participant.email)

    def create(self, participant: Participant) -> Participant:
        with self._lock:
            self._ensure_unique_email(participant)
            stored = dataclasses.replace(participant, version=0)
            self._records[stored.id] = stored
            return stored

    def get(self, participant_id: ParticipantId) -> Participant | None:
        return self._records.get(participant_id)

    def replace(self, participant: Participant) -> Participant:
        with self._lock:
            current = self._records.get(participant.id)
            if current is None:
                raise ParticipantNotFoundError(str(participant.id))
            if current.version != participant.version:
                raise ConcurrentModificationError("participant", str(participant.id))
            self._ensure_unique_email(participant)
            stored = dataclasses.replace(participant, version=participant.version + 1)
            self._records[stored.id] = stored
            return stored

    def delete(self, participant_id: ParticipantId) -> bool:
        with self._lock:
            return self._records.pop(participant_id, None) is not None

    def list_active(self) -> list[Participant]:
        active = [p for p in self._records.values() if p.is_active]
        return sorted(active, key=lambda p: p.registration_date, reverse=True)

    def ping(self) -> None:
        return None


class InMemoryLessonStore(LessonStore):
    def __init__(self) -> None:
        self._records: dict[LessonId, Lesson] = {}
        self._lock = Lock()

    def create(self, lesson: Lesson) -> Lesson:
        with self._lock:
            stored = dataclasses.replace(lesson, version=0)
            self._records[stored.id] = stored
            return stored

    def get(self, lesson_id: LessonId) -> Lesson | None:
        return self._records.get(lesson_id)

    def replace(self, lesson: Lesson) -> Lesson:
        with self._lock:
            current = self._records.get(lesson.id)
            if current is None:
                raise LessonNotFoundError(str(lesson.id))
            if current.version != lesson.version:
                raise ConcurrentModificationError("lesson", str(lesson.id))
            stored = dataclasses.replace(lesson, version=lesson.version + 1)
            self._records[stored.id] = stored
            return stored

    def delete(self, lesson_id: LessonId, expected_version: int | None = None) -> bool:
        with self._lock:
            current = self._records.get(lesson_id)
            if current is None:
                return False
            if expected_version is not None and current.version != expected_version:
                raise ConcurrentModificationError("lesson", str(lesson_id))
            del self._records[lesson_id]
            return True

    def list_lessons(self, status: LessonStatus | None = None) -> list[Lesson]:
        lessons = [
            lesson
            for lesson in self._records.values()
            if status is None or lesson.status == status
        ]
        return sorted(lessons, key=lambda lesson: lesson.date_time)

    def ping(self) -> None:
        return None
