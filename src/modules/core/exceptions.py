"""Error taxonomy and normalisation for the HTTP layer.

Every error that leaves the API is written as::

    {"success": false, "message": "...", "stack": "..."}

where ``stack`` is only present when ``DEBUG`` is on.  Domain code raises the
``ApiError`` subclasses below; store-level and validation errors raised by
Django or pydantic are translated here, never leaked in their raw shape.
"""

from __future__ import annotations

import traceback
from typing import Any, Iterable

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DataError, IntegrityError
from django.http import Http404, HttpRequest, JsonResponse
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------


class ApiError(Exception):
    """Base class for errors that carry their own HTTP status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class RequestValidationError(ApiError):
    """Malformed or out-of-range input (field level, aggregated)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


# ---------------------------------------------------------------------------
# Message helpers
# ---------------------------------------------------------------------------


_VALUE_ERROR_PREFIX = "Value error, "


def join_messages(messages: Iterable[str]) -> str:
    """Combine every violation into a single ``"; "``-separated message."""
    return "; ".join(m for m in messages if m)


def pydantic_messages(exc: PydanticValidationError) -> list[str]:
    """Flatten a pydantic error into human readable lines.

    Messages raised from our own validators come through as
    ``"Value error, <msg>"``; the prefix is dropped.
    """
    messages = []
    for error in exc.errors():
        msg = error["msg"]
        field = ".".join(str(part) for part in error["loc"])
        if msg.startswith(_VALUE_ERROR_PREFIX):
            messages.append(msg[len(_VALUE_ERROR_PREFIX) :])
        elif field:
            messages.append(f"{field}: {msg}")
        else:
            messages.append(msg)
    return messages


def django_messages(exc: DjangoValidationError) -> list[str]:
    if hasattr(exc, "message_dict"):
        return [
            f"{field}: {msg}" if field != "__all__" else msg
            for field, msgs in exc.message_dict.items()
            for msg in msgs
        ]
    return list(exc.messages)


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc).lower()
    return "unique" in text or "duplicate" in text


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------


def normalize_exception(exc: BaseException) -> ApiError:
    """Map any exception to an ``ApiError`` with a status code and message."""
    if isinstance(exc, ApiError):
        return exc
    if isinstance(exc, PydanticValidationError):
        return RequestValidationError(join_messages(pydantic_messages(exc)))
    if isinstance(exc, DjangoValidationError):
        return RequestValidationError(join_messages(django_messages(exc)))
    if isinstance(exc, IntegrityError):
        if _is_unique_violation(exc):
            return ConflictError()
        return RequestValidationError("Data violates a store constraint")
    if isinstance(exc, DataError):
        return RequestValidationError("Invalid value for a stored field")
    if isinstance(exc, OverflowError):
        return RequestValidationError("Numeric value out of range")
    if isinstance(exc, Http404):
        return NotFoundError(str(exc) or None)
    if isinstance(exc, APIException):
        error = ApiError(_api_exception_message(exc.detail))
        error.status_code = exc.status_code
        return error
    return InternalError()


def _api_exception_message(detail: Any) -> str:
    if isinstance(detail, dict):
        return join_messages(
            f"{key}: {_api_exception_message(value)}" for key, value in detail.items()
        )
    if isinstance(detail, list):
        return join_messages(_api_exception_message(item) for item in detail)
    return str(detail)


def error_payload(error: ApiError, exc: BaseException) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": False, "message": error.message}
    if settings.DEBUG:
        payload["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return payload


def _log(error: ApiError, exc: BaseException, path: str) -> None:
    if error.status_code >= 500:
        logger.error(
            "request.failed",
            status_code=error.status_code,
            path=path,
            error=repr(exc),
            exc_info=exc,
        )
    else:
        logger.warning(
            "request.rejected",
            status_code=error.status_code,
            path=path,
            error_message=error.message,
        )


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    """DRF ``EXCEPTION_HANDLER`` producing the uniform error envelope."""
    error = normalize_exception(exc)
    request = context.get("request")
    _log(error, exc, request.path if request is not None else "")

    return Response(error_payload(error, exc), status=error.status_code)


# ---------------------------------------------------------------------------
# Django-level handlers (outside DRF views)
# ---------------------------------------------------------------------------


def route_not_found(request: HttpRequest, exception: Exception | None = None) -> JsonResponse:
    """``handler404``: unknown routes return the JSON envelope."""
    error = NotFoundError(f"Route not found: {request.get_full_path()}")
    logger.warning("route.not_found", path=request.get_full_path())
    return JsonResponse(
        {"success": False, "message": error.message}, status=error.status_code
    )


def server_error(request: HttpRequest) -> JsonResponse:
    """``handler500``: last-resort failures outside DRF."""
    error = InternalError()
    return JsonResponse(
        {"success": False, "message": error.message}, status=error.status_code
    )
