"""Serializers for request validation and for rendering domain models.

Request serializers read camelCase JSON and produce snake_case keyword
arguments for the services. Response serializers read domain models.
"""

from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from courses.domain import EnrollmentStatus, LessonStatus, PaymentStatus, SkillLevel
from courses.domain.errors import InvalidFieldError
from courses.domain.policies import (
    MAX_PARTICIPANT_AGE,
    MIN_PARTICIPANT_AGE,
    ensure_schedulable,
)


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def _string_list(**kwargs) -> serializers.ListField:
    return serializers.ListField(
        child=serializers.CharField(max_length=200), required=False, **kwargs
    )


class EmergencyContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    phone = serializers.CharField(max_length=50)
    relationship = serializers.CharField(max_length=100)


# Requests


class ParticipantCreateSerializer(serializers.Serializer):
    """Validates a participant registration."""

    firstName = serializers.CharField(source="first_name", max_length=100)
    lastName = serializers.CharField(source="last_name", max_length=100)
    email = serializers.EmailField(max_length=254)
    phone = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=50
    )
    age = serializers.IntegerField(
        required=False,
        allow_null=True,
        min_value=MIN_PARTICIPANT_AGE,
        max_value=MAX_PARTICIPANT_AGE,
    )
    allergies = _string_list()
    dietaryRestrictions = _string_list(source="dietary_restrictions")
    emergencyContact = EmergencyContactSerializer(
        source="emergency_contact", required=False, allow_null=True
    )

    def validate_email(self, value: str) -> str:
        return value.lower()


class ParticipantUpdateSerializer(ParticipantCreateSerializer):
    """Validates a partial participant update."""

    isActive = serializers.BooleanField(source="is_active", required=False)


class LessonWriteSerializer(serializers.Serializer):
    """Validates a lesson for create, or with partial=True for update.

    context may carry existing_status (the stored status on update) and now.
    """

    title = serializers.CharField(max_length=200)
    description = serializers.CharField()
    skillLevel = serializers.ChoiceField(source="skill_level", choices=_values(SkillLevel))
    duration = serializers.IntegerField(min_value=1)
    maxParticipants = serializers.IntegerField(source="max_participants", min_value=1)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0")
    )
    dateTime = serializers.DateTimeField(source="date_time")
    status = serializers.ChoiceField(choices=_values(LessonStatus), required=False)
    location = serializers.CharField(required=False, allow_blank=True, max_length=200)
    instructor = serializers.CharField(required=False, allow_blank=True, max_length=200)
    ingredients = _string_list()
    equipment = _string_list()
    techniques = _string_list()

    def validate(self, attrs: dict) -> dict:
        date_time = attrs.get("date_time")
        if date_time is not None:
            statuses = (attrs.get("status"), self.context.get("existing_status"))
            now = self.context.get("now") or timezone.now()
            try:
                ensure_schedulable(date_time, statuses, now)
            except InvalidFieldError as error:
                raise serializers.ValidationError({"dateTime": [error.reason]})
        return attrs


class EnrollmentCreateSerializer(serializers.Serializer):
    participantId = serializers.UUIDField(source="participant_id")
    notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=1000
    )


class EnrollmentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=_values(EnrollmentStatus), required=False)
    paymentStatus = serializers.ChoiceField(
        source="payment_status", choices=_values(PaymentStatus), required=False
    )

    def validate(self, attrs: dict) -> dict:
        if not attrs:
            raise serializers.ValidationError(
                "Provide status and/or paymentStatus to update"
            )
        return attrs


# Responses


class ParticipantSerializer(serializers.Serializer):
    """Serializer for Participant domain model."""

    id = serializers.UUIDField(source="id.value")
    firstName = serializers.CharField(source="first_name")
    lastName = serializers.CharField(source="last_name")
    fullName = serializers.CharField(source="full_name")
    email = serializers.EmailField()
    phone = serializers.CharField()
    age = serializers.IntegerField()
    allergies = serializers.ListField(child=serializers.CharField())
    dietaryRestrictions = serializers.ListField(
        source="dietary_restrictions", child=serializers.CharField()
    )
    emergencyContact = EmergencyContactSerializer(source="emergency_contact")
    registrationDate = serializers.DateTimeField(source="registration_date")
    isActive = serializers.BooleanField(source="is_active")


class EnrollmentSerializer(serializers.Serializer):
    """Serializer for Enrollment domain model."""

    id = serializers.UUIDField(source="id.value")
    lessonId = serializers.UUIDField(source="lesson_id.value")
    participantId = serializers.UUIDField(source="participant_id.value")
    enrollmentDate = serializers.DateTimeField(source="enrollment_date")
    status = serializers.CharField()
    paymentStatus = serializers.CharField(source="payment_status")
    notes = serializers.CharField()


class LessonSerializer(serializers.Serializer):
    """Serializer for Lesson domain model, embedded enrollments included."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    skillLevel = serializers.CharField(source="skill_level")
    duration = serializers.IntegerField()
    maxParticipants = serializers.IntegerField(source="max_participants.value")
    price = serializers.DecimalField(
        source="price.amount", max_digits=10, decimal_places=2, coerce_to_string=False
    )
    dateTime = serializers.DateTimeField(source="date_time")
    location = serializers.CharField()
    instructor = serializers.CharField()
    ingredients = serializers.ListField(child=serializers.CharField())
    equipment = serializers.ListField(child=serializers.CharField())
    techniques = serializers.ListField(child=serializers.CharField())
    status = serializers.CharField()
    enrolledCount = serializers.IntegerField(source="active_enrollment_count")
    spotsRemaining = serializers.IntegerField(source="spots_remaining")
    enrollments = EnrollmentSerializer(many=True)
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")


class ParticipantEnrollmentSerializer(serializers.Serializer):
    lesson = LessonSerializer()
    enrollment = EnrollmentSerializer()


class LessonRosterSerializer(serializers.Serializer):
    lesson = LessonSerializer()
    participants = ParticipantSerializer(many=True)
