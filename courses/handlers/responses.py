"""Response envelope shared by every endpoint.

Shape: {success, data?, error?, details?, count?, message?}
"""

from typing import Any

from rest_framework import status
from rest_framework.response import Response


def success_response(
    data: Any = None,
    *,
    message: str | None = None,
    count: int | None = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if count is not None:
        body["count"] = count
    if message:
        body["message"] = message
    return Response(body, status=status_code)


def error_response(
    error: str,
    *,
    details: Any = None,
    status_code: int,
    headers: dict[str, str] | None = None,
) -> Response:
    body: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return Response(body, status=status_code, headers=headers)
