"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
A lesson row stores its enrollments as an embedded JSON array.
"""

import uuid

from django.db import models

from courses.domain import LessonStatus, SkillLevel


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.value.title()) for member in enum_cls]


class Participant(models.Model):
    """Persistence model for participants."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=50, blank=True, null=True)
    age = models.PositiveSmallIntegerField(blank=True, null=True)
    allergies = models.JSONField(default=list, blank=True)
    dietary_restrictions = models.JSONField(default=list, blank=True)
    emergency_contact = models.JSONField(blank=True, null=True)
    registration_date = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    version = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-registration_date"]
        indexes = [
            models.Index(
                fields=["is_active", "-registration_date"],
                name="participant_active_reg_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Lesson(models.Model):
    """Persistence model for lessons."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField()
    skill_level = models.CharField(max_length=20, choices=_choices(SkillLevel))
    duration = models.PositiveIntegerField(help_text="Duration in minutes")
    max_participants = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=10, decimal_places=2)
    date_time = models.DateTimeField()
    location = models.CharField(max_length=200, blank=True, default="")
    instructor = models.CharField(max_length=200, blank=True, default="")
    ingredients = models.JSONField(default=list, blank=True)
    equipment = models.JSONField(default=list, blank=True)
    techniques = models.JSONField(default=list, blank=True)
    status = models.CharField(
        max_length=20,
        choices=_choices(LessonStatus),
        default=LessonStatus.SCHEDULED.value,
    )
    enrollments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()
    version = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["date_time"]
        indexes = [
            models.Index(fields=["date_time"], name="lesson_date_time_idx"),
            models.Index(fields=["status", "date_time"], name="lesson_status_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} - {self.date_time}"
