from courses.handlers.views import (
    HealthView,
    LessonDetailView,
    LessonEnrollmentDetailView,
    LessonEnrollmentListView,
    LessonListView,
    LessonRosterView,
    ParticipantDetailView,
    ParticipantEnrollmentListView,
    ParticipantListView,
)

__all__ = [
    "HealthView",
    "ParticipantListView",
    "ParticipantDetailView",
    "ParticipantEnrollmentListView",
    "LessonListView",
    "LessonDetailView",
    "LessonRosterView",
    "LessonEnrollmentListView",
    "LessonEnrollmentDetailView",
]
