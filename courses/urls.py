from django.urls import path

from courses.handlers import (
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

urlpatterns = [
    path("health", HealthView.as_view(), name="health"),
    path("participants", ParticipantListView.as_view(), name="participant-list"),
    path(
        "participants/<str:participant_id>",
        ParticipantDetailView.as_view(),
        name="participant-detail",
    ),
    path(
        "participants/<str:participant_id>/enrollments",
        ParticipantEnrollmentListView.as_view(),
        name="participant-enrollments",
    ),
    path("lessons", LessonListView.as_view(), name="lesson-list"),
    path("lessons/<str:lesson_id>", LessonDetailView.as_view(), name="lesson-detail"),
    path(
        "lessons/<str:lesson_id>/participants",
        LessonRosterView.as_view(),
        name="lesson-participants",
    ),
    path(
        "lessons/<str:lesson_id>/enrollments",
        LessonEnrollmentListView.as_view(),
        name="lesson-enrollments",
    ),
    path(
        "lessons/<str:lesson_id>/enrollments/<str:participant_id>",
        LessonEnrollmentDetailView.as_view(),
        name="lesson-enrollment-detail",
    ),
]
