from django.db import DatabaseError, IntegrityError
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("hackreg")


# --- Error kinds (stable values exposed to the frontend) ---
KIND_VALIDATION = "ValidationError"
KIND_NOT_FOUND = "NotFound"
KIND_CONFLICT = "Conflict"
KIND_CONSTRAINT = "ConstraintViolation"
KIND_UNAUTHORIZED = "Unauthorized"
KIND_UNAVAILABLE = "Unavailable"

STATUS_KINDS = {
    status.HTTP_400_BAD_REQUEST: KIND_VALIDATION,
    status.HTTP_401_UNAUTHORIZED: KIND_UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: KIND_UNAUTHORIZED,
    status.HTTP_404_NOT_FOUND: KIND_NOT_FOUND,
    status.HTTP_409_CONFLICT: KIND_CONFLICT,
    status.HTTP_503_SERVICE_UNAVAILABLE: KIND_UNAVAILABLE,
}


class DomainError(APIException):
    """
    Base for every failure the hackathon apps raise on purpose.

    `kind` groups failures for the frontend, `default_code` names the
    specific failure (team_full, already_in_team, ...).
    """
    kind = KIND_VALIDATION
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "error"


class Unavailable(DomainError):
    kind = KIND_UNAVAILABLE
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service temporarily unavailable. Please try again."
    default_code = "unavailable"


class StorageConflict(DomainError):
    kind = KIND_CONFLICT
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record conflicts with an existing one."
    default_code = "conflict"


def error_kind(exc, status_code):
    return getattr(exc, "kind", None) or STATUS_KINDS.get(status_code)


def error_code(exc):
    if not isinstance(exc, APIException):
        return None
    codes = exc.get_codes()
    return codes if isinstance(codes, str) else None


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    # Raw storage errors never reach the client
    if isinstance(exc, IntegrityError):
        logger.warning(f"Unmapped integrity error: {exc}")
        exc = StorageConflict()
    elif isinstance(exc, DatabaseError):
        logger.error(f"Storage failure: {exc}")
        exc = Unavailable()

    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "kind": error_kind(exc, response.status_code),
                "code": error_code(exc),
                "errors": response.data,
            },
            status=response.status_code,
            headers={
                header: response[header]
                for header in ("WWW-Authenticate", "Retry-After")
                if header in response
            },
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "kind": None,
            "code": None,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
