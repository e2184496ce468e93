"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.

Every record carries a version. replace() and conditional delete() only
succeed when the stored version still matches the one that was read, and
raise ConcurrentModificationError otherwise.
"""

from abc import ABC, abstractmethod

from courses.domain import Lesson, LessonId, LessonStatus, Participant, ParticipantId


class ParticipantStore(ABC):
    """Interface for participant persistence operations."""

    @abstractmethod
    def create(self, participant: Participant) -> Participant:
        """Persist a new participant and return it as stored.

        Raises:
            DuplicateEmailError: If another participant uses the same email.
        """
        ...

    @abstractmethod
    def get(self, participant_id: ParticipantId) -> Participant | None:
        """Return a participant by ID, or None if not found."""
        ...

    @abstractmethod
    def replace(self, participant: Participant) -> Participant:
        """Overwrite a participant if its version is unchanged since it was read.

        Returns the stored participant with its version incremented.

        Raises:
            ParticipantNotFoundError: If the participant no longer exists.
            ConcurrentModificationError: If the stored version differs.
            DuplicateEmailError: If another participant uses the same email.
        """
        ...

    @abstractmethod
    def delete(self, participant_id: ParticipantId) -> bool:
        """Remove a participant permanently. Return False if it did not exist."""
        ...

    @abstractmethod
    def list_active(self) -> list[Participant]:
        """Return active participants ordered by registration_date descending."""
        ...

    @abstractmethod
    def ping(self) -> None:
        """Check the store is reachable, raising StoreError if not."""
        ...


class LessonStore(ABC):
    """Interface for lesson persistence operations, enrollments included."""

    @abstractmethod
    def create(self, lesson: Lesson) -> Lesson:
        """Persist a new lesson and return it as stored."""
        ...

    @abstractmethod
    def get(self, lesson_id: LessonId) -> Lesson | None:
        """Return a lesson by ID, or None if not found."""
        ...

    @abstractmethod
    def replace(self, lesson: Lesson) -> Lesson:
        """Overwrite a lesson if its version is unchanged since it was read.

        Raises:
            LessonNotFoundError: If the lesson no longer exists.
            ConcurrentModificationError: If the stored version differs.
        """
        ...

    @abstractmethod
    def delete(self, lesson_id: LessonId, expected_version: int | None = None) -> bool:
        """Remove a lesson permanently. Return False if it did not exist.

        Raises:
            ConcurrentModificationError: If expected_version is given and the
                stored version differs.
        """
        ...

    @abstractmethod
    def list_lessons(self, status: LessonStatus | None = None) -> list[Lesson]:
        """Return lessons ordered by date_time ascending, optionally filtered."""
        ...

    @abstractmethod
    def ping(self) -> None:
        """Check the store is reachable, raising StoreError if not."""
        ...
