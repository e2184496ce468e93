"""DRF exception handler mapping errors to the response envelope.

Domain errors map by kind; DRF errors keep their status code; anything else
is logged with its traceback and reported as a 500 without internals.
"""

import logging

from django.conf import settings
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from courses.domain.errors import (
    CapacityExceededError,
    ConflictError,
    DomainError,
    DomainValidationError,
    NotFoundError,
    StoreError,
)
from courses.handlers.responses import error_response

logger = logging.getLogger(__name__)

DOMAIN_ERROR_STATUS: tuple[tuple[type[DomainError], int, str], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not found"),
    (ConflictError, status.HTTP_409_CONFLICT, "Conflict"),
    (CapacityExceededError, status.HTTP_409_CONFLICT, "Capacity exceeded"),
    (DomainValidationError, status.HTTP_400_BAD_REQUEST, "Validation failed"),
    (StoreError, status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable"),
)


def _view_name(context: dict) -> str:
    view = context.get("view")
    return type(view).__name__ if view is not None else "unknown view"


def domain_error_response(exc: DomainError, context: dict) -> Response:
    for kind, status_code, title in DOMAIN_ERROR_STATUS:
        if isinstance(exc, kind):
            break
    else:
        status_code, title = status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error"

    if status_code >= 500:
        logger.error("%s failed: %s", _view_name(context), exc, exc_info=exc)
    else:
        logger.info("%s rejected request: %s", _view_name(context), exc)
    return error_response(title, details=exc.message, status_code=status_code)


def courses_exception_handler(exc: Exception, context: dict) -> Response | None:
    if isinstance(exc, DomainError):
        return domain_error_response(exc, context)

    if isinstance(exc, exceptions.ValidationError):
        return error_response(
            "Validation failed",
            details=exc.detail,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        return error_response(
            str(detail) if detail is not None else "Request failed",
            details=response.data if detail is None else None,
            status_code=response.status_code,
            headers={
                name: value
                for name, value in response.items()
                if name.lower() != "content-type"
            },
        )

    logger.exception("Unhandled error in %s", _view_name(context), exc_info=exc)
    return error_response(
        "Internal server error",
        details=str(exc) if settings.DEBUG else None,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
