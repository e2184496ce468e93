"""Participant service - registration and profile business logic.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import dataclasses
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from courses.domain import EmergencyContact, Participant, ParticipantId
from courses.domain.errors import InvalidFieldError, ParticipantNotFoundError
from courses.domain.policies import MAX_PARTICIPANT_AGE, MIN_PARTICIPANT_AGE
from courses.services import fields
from courses.services.retry import RetryPolicy
from courses.stores.interfaces import ParticipantStore

REQUIRED_FIELDS = ("first_name", "last_name", "email")
UPDATABLE_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "email",
        "phone",
        "age",
        "allergies",
        "dietary_restrictions",
        "emergency_contact",
        "registration_date",
        "is_active",
    }
)
# Assigned by the service or the store; silently dropped on create.
MANAGED_FIELDS = frozenset({"id", "version"})


def _emergency_contact(value: Any) -> EmergencyContact | None:
    if value is None or isinstance(value, EmergencyContact):
        return value
    if not isinstance(value, Mapping):
        raise InvalidFieldError("emergency_contact", "must be an object")
    return EmergencyContact(
        name=fields.text("emergency_contact.name", value.get("name")),
        phone=fields.text("emergency_contact.phone", value.get("phone")),
        relationship=fields.text(
            "emergency_contact.relationship", value.get("relationship")
        ),
    )


def _clean(values: Mapping[str, Any]) -> dict[str, Any]:
    cleaners: dict[str, Callable[[Any], Any]] = {
        "first_name": lambda v: fields.text("first_name", v),
        "last_name": lambda v: fields.text("last_name", v),
        "email": lambda v: fields.text("email", v).lower(),
        "phone": lambda v: fields.optional_text("phone", v),
        "age": lambda v: None
        if v is None
        else fields.integer("age", v, MIN_PARTICIPANT_AGE, MAX_PARTICIPANT_AGE),
        "allergies": lambda v: fields.string_tuple("allergies", v),
        "dietary_restrictions": lambda v: fields.string_tuple(
            "dietary_restrictions", v
        ),
        "emergency_contact": _emergency_contact,
        "registration_date": lambda v: fields.moment("registration_date", v),
        "is_active": lambda v: fields.boolean("is_active", v),
    }
    return {name: cleaners[name](value) for name, value in values.items()}


class ParticipantService:
    """Service for participant operations."""

    def __init__(
        self,
        store: ParticipantStore,
        *,
        clock: Callable[[], datetime] = fields.utc_now,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._retry = retry or RetryPolicy()

    def create_participant(self, **values: Any) -> Participant:
        """Register a participant under a fresh ID.

        registration_date defaults to now and is_active to True.

        Raises:
            InvalidFieldError: If a field is missing, unknown or malformed.
            DuplicateEmailError: If the store already holds the email.
        """
        values = {k: v for k, v in values.items() if k not in MANAGED_FIELDS}
        if values.get("registration_date") is None:
            values["registration_date"] = self._clock()
        fields.reject_unknown(values, UPDATABLE_FIELDS)
        fields.require_present(values, REQUIRED_FIELDS)
        participant = Participant(id=ParticipantId.generate(), **_clean(values))
        return self._store.create(participant)

    def get_participant(self, participant_id: str) -> Participant | None:
        """Return a participant by ID, or None if it does not exist.

        Raises:
            InvalidIdError: If the participant_id is not a valid UUID.
        """
        pid = fields.parse_id(ParticipantId, participant_id, "participant")
        return self._store.get(pid)

    def get_all_participants(self) -> list[Participant]:
        """Return active participants, most recently registered first."""
        return self._store.list_active()

    def update_participant(self, participant_id: str, **changes: Any) -> Participant:
        """Merge the given fields over the stored participant.

        Nested values such as emergency_contact are replaced wholesale.

        Raises:
            InvalidIdError: If the participant_id is not a valid UUID.
            InvalidFieldError: If a field is unknown, managed or malformed.
            ParticipantNotFoundError: If the participant does not exist.
        """
        pid = fields.parse_id(ParticipantId, participant_id, "participant")
        fields.reject_unknown(changes, UPDATABLE_FIELDS)
        cleaned = _clean(changes)

        def attempt() -> Participant:
            existing = self._store.get(pid)
            if existing is None:
                raise ParticipantNotFoundError(str(pid))
            return self._store.replace(dataclasses.replace(existing, **cleaned))

        return self._retry.run(attempt)

    def delete_participant(self, participant_id: str) -> Participant:
        """Deactivate a participant, keeping the record."""
        return self.update_participant(participant_id, is_active=False)

    def hard_delete_participant(self, participant_id: str) -> None:
        """Remove a participant permanently.

        Raises:
            ParticipantNotFoundError: If the participant does not exist.
        """
        pid = fields.parse_id(ParticipantId, participant_id, "participant")
        if not self._store.delete(pid):
            raise ParticipantNotFoundError(str(pid))

    def get_participant_full_name(self, participant_id: str) -> str:
        participant = self.get_participant(participant_id)
        if participant is None:
            return "Unknown Participant"
        return participant.full_name

    def check_connection(self) -> None:
        self._store.ping()
