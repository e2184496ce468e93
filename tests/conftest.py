"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from courses.services import CourseOptions, CourseServices, RetryPolicy
from courses.stores import InMemoryLessonStore, InMemoryParticipantStore

START = datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc)


class TickingClock:
    """Clock that moves one second forward on every read."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def participant_store() -> InMemoryParticipantStore:
    return InMemoryParticipantStore()


@pytest.fixture
def lesson_store() -> InMemoryLessonStore:
    return InMemoryLessonStore()


@pytest.fixture
def options() -> CourseOptions:
    return CourseOptions(retry=RetryPolicy(delay=0))


@pytest.fixture
def services(participant_store, lesson_store, options, clock) -> CourseServices:
    return CourseServices.build(participant_store, lesson_store, options, clock=clock)


@pytest.fixture
def participant_values():
    def make(**overrides):
        values = {
            "first_name": "Ada",
            "last_name": "Baker",
            "email": "ada@example.com",
        }
        values.update(overrides)
        return values

    return make


@pytest.fixture
def lesson_values():
    def make(**overrides):
        values = {
            "title": "Shortbread Basics",
            "description": "Butter, sugar, flour and patience",
            "skill_level": "beginner",
            "duration": 90,
            "max_participants": 2,
            "price": "45.00",
            "date_time": START + timedelta(days=7),
        }
        values.update(overrides)
        return values

    return make


@pytest.fixture
def participant_payload():
    def make(**overrides):
        payload = {
            "firstName": "Ada",
            "lastName": "Baker",
            "email": "ada@example.com",
        }
        payload.update(overrides)
        return payload

    return make


@pytest.fixture
def lesson_payload():
    def make(**overrides):
        payload = {
            "title": "Shortbread Basics",
            "description": "Butter, sugar, flour and patience",
            "skillLevel": "beginner",
            "duration": 90,
            "maxParticipants": 2,
            "price": 45,
            "dateTime": (datetime.now(timezone.utc) + timedelta(days=7)).isoformat(),
        }
        payload.update(overrides)
        return payload

    return make
