from courses.domain.models import (
    Enrollment,
    Lesson,
    LessonRoster,
    Participant,
    ParticipantEnrollment,
)
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

__all__ = [
    "Participant",
    "Lesson",
    "Enrollment",
    "ParticipantEnrollment",
    "LessonRoster",
    "ParticipantId",
    "LessonId",
    "EnrollmentId",
    "Money",
    "Capacity",
    "EmergencyContact",
    "SkillLevel",
    "LessonStatus",
    "EnrollmentStatus",
    "PaymentStatus",
]
