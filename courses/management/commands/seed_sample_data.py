"""Seed a sample participant, lesson and enrollment.

Running the command twice reuses the records created the first time.
"""

import logging
from datetime import timedelta

from django.apps import apps
from django.core.management.base import BaseCommand, CommandError

from courses.domain.errors import AlreadyEnrolledError, DuplicateEmailError
from courses.services.fields import utc_now

logger = logging.getLogger(__name__)

SAMPLE_PARTICIPANT = {
    "first_name": "John",
    "last_name": "Doe",
    "email": "john.doe@example.com",
    "phone": "+1-555-0123",
    "age": 28,
    "allergies": ["peanuts"],
    "dietary_restrictions": [],
    "emergency_contact": {
        "name": "Jane Doe",
        "phone": "+1-555-0124",
        "relationship": "spouse",
    },
}

SAMPLE_LESSON = {
    "title": "Introduction to Cookie Baking",
    "description": "Learn the basics of cookie baking with hands-on techniques",
    "skill_level": "beginner",
    "duration": 120,
    "max_participants": 10,
    "price": 45,
    "ingredients": ["flour", "butter", "sugar", "eggs", "vanilla extract"],
    "equipment": ["mixing bowls", "electric mixer", "baking sheets"],
    "techniques": ["creaming butter and sugar", "proper mixing techniques"],
    "location": "Kitchen Studio A",
    "instructor": "Chef Sarah",
}

SAMPLE_NOTES = "Looking forward to learning new techniques!"


class Command(BaseCommand):
    help = "Create a sample participant, lesson and enrollment"

    def handle(self, *args, **options):
        services = apps.get_app_config("courses").services

        try:
            participant = services.participants.create_participant(**SAMPLE_PARTICIPANT)
            self.stdout.write(f"Created participant {participant.id}")
        except DuplicateEmailError:
            participant = next(
                (
                    p
                    for p in services.participants.get_all_participants()
                    if p.email == SAMPLE_PARTICIPANT["email"]
                ),
                None,
            )
            if participant is None:
                raise CommandError("Sample participant exists but is deactivated")
            self.stdout.write(f"Reusing participant {participant.id}")

        lesson = next(
            (
                lesson
                for lesson in services.lessons.get_all_lessons()
                if lesson.title == SAMPLE_LESSON["title"]
            ),
            None,
        )
        if lesson is None:
            lesson = services.lessons.create_lesson(
                **SAMPLE_LESSON,
                date_time=utc_now() + timedelta(days=7),
            )
            self.stdout.write(f"Created lesson {lesson.id}")
        else:
            self.stdout.write(f"Reusing lesson {lesson.id}")

        try:
            enrollment = services.enrollments.enroll_participant(
                str(lesson.id), str(participant.id), SAMPLE_NOTES
            )
            self.stdout.write(f"Created enrollment {enrollment.id}")
        except AlreadyEnrolledError:
            self.stdout.write("Participant already enrolled")

        logger.info("Sample data ready: lesson %s, participant %s", lesson.id, participant.id)
        self.stdout.write(self.style.SUCCESS("Sample data ready"))
