"""Coercion of untyped field values arriving at the services.

Every helper raises InvalidFieldError naming the offending field.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any, TypeVar
from uuid import UUID

from courses.domain.errors import InvalidFieldError, InvalidIdError

E = TypeVar("E", bound=StrEnum)
IdT = TypeVar("IdT")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_id(id_cls: type[IdT], value: Any, entity: str) -> IdT:
    """Turn a string, UUID or typed id into id_cls."""
    if isinstance(value, id_cls):
        return value
    if isinstance(value, UUID):
        return id_cls(value)
    if isinstance(value, str):
        try:
            return id_cls.from_string(value)
        except ValueError:
            pass
    raise InvalidIdError(entity)


def reject_unknown(values: Mapping[str, Any], allowed: Iterable[str]) -> None:
    unknown = sorted(set(values) - set(allowed))
    if unknown:
        raise InvalidFieldError(unknown[0], "is not an updatable field")


def require_present(values: Mapping[str, Any], required: Iterable[str]) -> None:
    for name in required:
        if name not in values:
            raise InvalidFieldError(name, "is required")


def text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidFieldError(name, "must be a non-empty string")
    return value.strip()


def optional_text(name: str, value: Any, empty: str | None = None) -> str | None:
    if value is None:
        return empty
    if not isinstance(value, str):
        raise InvalidFieldError(name, "must be a string")
    return value.strip() or empty


def string_tuple(name: str, value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise InvalidFieldError(name, "must be a list of strings")
    items = tuple(value)
    if not all(isinstance(item, str) for item in items):
        raise InvalidFieldError(name, "must be a list of strings")
    return tuple(item.strip() for item in items if item.strip())


def integer(name: str, value: Any, minimum: int | None = None, maximum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(name, "must be an integer")
    if minimum is not None and value < minimum:
        raise InvalidFieldError(name, f"must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise InvalidFieldError(name, f"must be at most {maximum}")
    return value


def decimal(name: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidFieldError(name, "must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidFieldError(name, "must be a number") from None
    if not amount.is_finite():
        raise InvalidFieldError(name, "must be a number")
    return amount


def boolean(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidFieldError(name, "must be true or false")
    return value


def moment(name: str, value: Any) -> datetime:
    """Accept an aware datetime or an ISO-8601 string."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise InvalidFieldError(name, "must be a valid ISO date string") from None
    if not isinstance(value, datetime):
        raise InvalidFieldError(name, "must be a date and time")
    if value.tzinfo is None:
        raise InvalidFieldError(name, "must include a timezone")
    return value


def choice(name: str, enum_cls: type[E], value: Any) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidFieldError(name, f"must be one of: {allowed}") from None
