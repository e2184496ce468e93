from courses.services.enrollment_service import EnrollmentService
from courses.services.lesson_service import LessonService
from courses.services.participant_service import ParticipantService
from courses.services.registry import CourseOptions, CourseServices
from courses.services.retry import RetryPolicy

__all__ = [
    "ParticipantService",
    "LessonService",
    "EnrollmentService",
    "CourseOptions",
    "CourseServices",
    "RetryPolicy",
]
