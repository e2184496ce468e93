"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/exceptions.py)
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.apps import apps
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from courses.domain.errors import LessonNotFoundError, ParticipantNotFoundError
from courses.handlers.responses import success_response
from courses.handlers.serializers import (
    EnrollmentCreateSerializer,
    EnrollmentSerializer,
    EnrollmentUpdateSerializer,
    LessonRosterSerializer,
    LessonSerializer,
    LessonWriteSerializer,
    ParticipantCreateSerializer,
    ParticipantEnrollmentSerializer,
    ParticipantSerializer,
    ParticipantUpdateSerializer,
)
from courses.services import CourseServices

logger = logging.getLogger(__name__)


def _flag(request: Request, name: str) -> bool:
    return request.query_params.get(name, "").lower() == "true"


class CoursesView(APIView):
    """Base view giving access to the services wired at start-up."""

    @property
    def services(self) -> CourseServices:
        return apps.get_app_config("courses").services


class HealthView(CoursesView):
    """Handler for GET /api/health"""

    def get(self, request: Request) -> Response:
        self.services.check_connection()
        return success_response({"database": "ok"}, message="Store is reachable")


class ParticipantListView(CoursesView):
    """Handler for GET, POST /api/participants"""

    def get(self, request: Request) -> Response:
        participants = self.services.participants.get_all_participants()
        return success_response(
            ParticipantSerializer(participants, many=True).data,
            count=len(participants),
            message="Participants fetched successfully",
        )

    def post(self, request: Request) -> Response:
        serializer = ParticipantCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        participant = self.services.participants.create_participant(
            **serializer.validated_data
        )
        logger.info("Registered participant %s", participant.id)
        return success_response(
            ParticipantSerializer(participant).data,
            message="Participant created successfully",
            status_code=status.HTTP_201_CREATED,
        )


class ParticipantDetailView(CoursesView):
    """Handler for GET, PUT, DELETE /api/participants/{participant_id}"""

    def get(self, request: Request, participant_id: str) -> Response:
        participant = self.services.participants.get_participant(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(participant_id)
        return success_response(
            ParticipantSerializer(participant).data,
            message="Participant fetched successfully",
        )

    def put(self, request: Request, participant_id: str) -> Response:
        serializer = ParticipantUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        participant = self.services.participants.update_participant(
            participant_id, **serializer.validated_data
        )
        return success_response(
            ParticipantSerializer(participant).data,
            message="Participant updated successfully",
        )

    def delete(self, request: Request, participant_id: str) -> Response:
        if _flag(request, "hard"):
            self.services.participants.hard_delete_participant(participant_id)
            logger.info("Permanently deleted participant %s", participant_id)
            message = "Participant permanently deleted successfully"
        else:
            self.services.participants.delete_participant(participant_id)
            message = "Participant deactivated successfully"
        return success_response({"id": participant_id}, message=message)


class ParticipantEnrollmentListView(CoursesView):
    """Handler for GET /api/participants/{participant_id}/enrollments"""

    def get(self, request: Request, participant_id: str) -> Response:
        if self.services.participants.get_participant(participant_id) is None:
            raise ParticipantNotFoundError(participant_id)
        items = self.services.enrollments.get_enrollments_for_participant(participant_id)
        return success_response(
            ParticipantEnrollmentSerializer(items, many=True).data,
            count=len(items),
            message="Enrollments fetched successfully",
        )


class LessonListView(CoursesView):
    """Handler for GET, POST /api/lessons"""

    def get(self, request: Request) -> Response:
        lesson_status = request.query_params.get("status")
        if lesson_status:
            lessons = self.services.lessons.get_lessons_by_status(lesson_status)
        else:
            lessons = self.services.lessons.get_all_lessons()
        return success_response(
            LessonSerializer(lessons, many=True).data,
            count=len(lessons),
            message="Lessons fetched successfully",
        )

    def post(self, request: Request) -> Response:
        serializer = LessonWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lesson = self.services.lessons.create_lesson(**serializer.validated_data)
        logger.info("Scheduled lesson %s for %s", lesson.id, lesson.date_time)
        return success_response(
            LessonSerializer(lesson).data,
            message="Lesson created successfully",
            status_code=status.HTTP_201_CREATED,
        )


class LessonDetailView(CoursesView):
    """Handler for GET, PUT, DELETE /api/lessons/{lesson_id}"""

    def get(self, request: Request, lesson_id: str) -> Response:
        lesson = self.services.lessons.get_lesson(lesson_id)
        if lesson is None:
            raise LessonNotFoundError(lesson_id)
        return success_response(
            LessonSerializer(lesson).data, message="Lesson fetched successfully"
        )

    def put(self, request: Request, lesson_id: str) -> Response:
        existing = self.services.lessons.get_lesson(lesson_id)
        if existing is None:
            raise LessonNotFoundError(lesson_id)
        serializer = LessonWriteSerializer(
            data=request.data,
            partial=True,
            context={"existing_status": existing.status},
        )
        serializer.is_valid(raise_exception=True)
        lesson = self.services.lessons.update_lesson(
            lesson_id, **serializer.validated_data
        )
        return success_response(
            LessonSerializer(lesson).data, message="Lesson updated successfully"
        )

    def delete(self, request: Request, lesson_id: str) -> Response:
        self.services.lessons.delete_lesson(lesson_id, force=_flag(request, "force"))
        logger.info("Deleted lesson %s", lesson_id)
        return success_response({"id": lesson_id}, message="Lesson deleted successfully")


class LessonRosterView(CoursesView):
    """Handler for GET /api/lessons/{lesson_id}/participants"""

    def get(self, request: Request, lesson_id: str) -> Response:
        roster = self.services.enrollments.get_lesson_roster(lesson_id)
        if roster is None:
            raise LessonNotFoundError(lesson_id)
        return success_response(
            LessonRosterSerializer(roster).data,
            count=len(roster.participants),
            message="Lesson participants fetched successfully",
        )


class LessonEnrollmentListView(CoursesView):
    """Handler for GET, POST /api/lessons/{lesson_id}/enrollments"""

    def get(self, request: Request, lesson_id: str) -> Response:
        enrollments = self.services.enrollments.get_enrollments_for_lesson(lesson_id)
        if not enrollments and self.services.lessons.get_lesson(lesson_id) is None:
            raise LessonNotFoundError(lesson_id)
        return success_response(
            EnrollmentSerializer(enrollments, many=True).data,
            count=len(enrollments),
            message="Enrollments fetched successfully",
        )

    def post(self, request: Request, lesson_id: str) -> Response:
        serializer = EnrollmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enrollment = self.services.enrollments.enroll_participant(
            lesson_id,
            serializer.validated_data["participant_id"],
            serializer.validated_data.get("notes"),
        )
        logger.info(
            "Enrolled participant %s in lesson %s",
            enrollment.participant_id,
            enrollment.lesson_id,
        )
        return success_response(
            EnrollmentSerializer(enrollment).data,
            message="Participant enrolled successfully",
            status_code=status.HTTP_201_CREATED,
        )


class LessonEnrollmentDetailView(CoursesView):
    """Handler for PATCH, DELETE /api/lessons/{lesson_id}/enrollments/{participant_id}"""

    def patch(self, request: Request, lesson_id: str, participant_id: str) -> Response:
        serializer = EnrollmentUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enrollment = self.services.enrollments.update_enrollment(
            lesson_id, participant_id, **serializer.validated_data
        )
        return success_response(
            EnrollmentSerializer(enrollment).data,
            message="Enrollment updated successfully",
        )

    def delete(self, request: Request, lesson_id: str, participant_id: str) -> Response:
        self.services.enrollments.unenroll_participant(lesson_id, participant_id)
        return success_response(
            {"lessonId": lesson_id, "participantId": participant_id},
            message="Participant unenrolled successfully",
        )
