from courses.stores.interfaces import LessonStore, ParticipantStore
from courses.stores.memory_store import InMemoryLessonStore, InMemoryParticipantStore

__all__ = [
    "ParticipantStore",
    "LessonStore",
    "InMemoryParticipantStore",
    "InMemoryLessonStore",
]
