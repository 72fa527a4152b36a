"""Custom exception handling to enforce the API error envelope."""

import logging
from typing import Any

from django.conf import settings
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


class Conflict(APIException):
    """Raised when a unique field (username, email) is already taken."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


# Ordered: the first matching class decides the machine-readable kind.
_ERROR_KINDS: list[tuple[type[Exception], str]] = [
    (ValidationError, "ValidationError"),
    (AuthenticationFailed, "AuthenticationError"),
    (NotAuthenticated, "AuthenticationError"),
    (PermissionDenied, "AuthorizationError"),
    (NotFound, "NotFound"),
    (Http404, "NotFound"),
    (Conflict, "ConflictError"),
]

_STATUS_KINDS = {
    status.HTTP_400_BAD_REQUEST: "ValidationError",
    status.HTTP_401_UNAUTHORIZED: "AuthenticationError",
    status.HTTP_403_FORBIDDEN: "AuthorizationError",
    status.HTTP_404_NOT_FOUND: "NotFound",
    status.HTTP_409_CONFLICT: "ConflictError",
}


def error_kind(exc: Exception, status_code: int) -> str:
    """Return the stable error kind for an exception/status pair."""

    for exc_class, kind in _ERROR_KINDS:
        if isinstance(exc, exc_class):
            return kind
    return _STATUS_KINDS.get(status_code, "UnexpectedError" if status_code >= 500 else "RequestError")


def error_response(kind: str, errors: list[Any], status_code: int) -> Response:
    """Build an error payload in the `{data, kind, errors}` envelope."""

    return Response({"data": None, "kind": kind, "errors": errors}, status=status_code)


def _normalize_errors(payload: Any) -> list[Any]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        # Common DRF pattern: {"detail": "..."}
        return [payload["detail"]]
    return [payload]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap DRF errors in `{ "data": null, "kind": ..., "errors": [...] }` shape.

    - Uses DRF's default handler to produce the base response.
    - Normalizes auth/permission messages so credential details do not leak.
    - Optionally exposes the specific credential failure when DEBUG_AUTH_ERRORS is enabled.
    - Anything DRF does not recognise (database failures included) becomes a
      500 UnexpectedError with a generic message; details go to the log only.
    """

    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", type(view).__name__ if view else "request", exc_info=exc
        )
        return error_response(
            "UnexpectedError", [UNEXPECTED_ERROR_MESSAGE], status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    # Normalize auth-related status codes to 401, regardless of DRF's default
    # mapping, since our authenticator does not advertise a WWW-Authenticate header.
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    # Successful responses are untouched here; BaseAPIView handles them.
    if response.status_code >= 400:
        base_errors = response.data

        if response.status_code == status.HTTP_401_UNAUTHORIZED:
            if getattr(settings, "DEBUG_AUTH_ERRORS", False):
                # Surface the specific underlying message (e.g. "Token has expired").
                errors = _normalize_errors(base_errors)
            else:
                errors = [
                    "Authentication credentials were not provided or are invalid, "
                    "expired, or the user is inactive."
                ]
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            errors = ["You do not have permission to perform this action on this resource."]
        elif response.status_code >= 500:
            errors = [UNEXPECTED_ERROR_MESSAGE]
        else:
            errors = _normalize_errors(base_errors)

        response.data = {
            "data": None,
            "kind": error_kind(exc, response.status_code),
            "errors": errors,
        }

    return response


__all__ = ["Conflict", "custom_exception_handler", "error_kind", "error_response"]
