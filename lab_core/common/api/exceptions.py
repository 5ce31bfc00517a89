# backend/lab_core/common/api/exceptions.py
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ErrorKind:
    VALIDATION = "validation"
    INVARIANT = "invariant"
    OWNERSHIP = "ownership"
    NOT_FOUND = "not_found"
    AUTH = "auth"
    ERROR = "error"


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(
    *,
    request=None,
    code: str,
    message: str,
    details: Any = None,
    kind: str = ErrorKind.ERROR,
) -> dict[str, Any]:
    """
    Canonical error envelope for the lab API.

    `kind` tells the caller whether to fix the input and retry (validation)
    or to escalate (invariant, ownership).
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "kind": kind,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"
    kind = ErrorKind.INVARIANT

    def __init__(self, detail=None, code=None, *, details: dict[str, Any] | None = None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)
        self.details = details


class InvariantViolation(ConflictError):
    """
    A financial rule blocked the operation. Nothing was persisted.
    Subclasses only set default_detail/default_code.
    """
    default_detail = "Operation violates a financial invariant."
    default_code = "invariant_violation"


class OwnershipViolation(APIException):
    """
    One or more referenced works do not exist or belong to another client.
    The whole request is rejected.
    """
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "One or more works do not belong to this client."
    default_code = "ownership_violation"
    kind = ErrorKind.OWNERSHIP

    def __init__(self, detail=None, code=None, *, details: dict[str, Any] | None = None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)
        self.details = details


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def _kind_for(exc: Exception, http_status: int) -> str:
    explicit = getattr(exc, "kind", None)
    if explicit:
        return explicit
    if isinstance(exc, ValidationError):
        return ErrorKind.VALIDATION
    if isinstance(exc, (Http404, NotFound)):
        return ErrorKind.NOT_FOUND
    if http_status in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        return ErrorKind.AUTH
    return ErrorKind.ERROR


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)
    kind = _kind_for(exc, http_status)

    data = response.data

    # Message + details rules:
    # 1) exception carries structured details -> message=detail, details=exc.details
    # 2) {"detail": "...", ...} -> message=detail, details={...without detail} or None
    # 3) otherwise (field errors) -> message="Request failed.", details=data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        message = str(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None

    extra = getattr(exc, "details", None)
    if extra is not None:
        details = extra

    if kind in (ErrorKind.INVARIANT, ErrorKind.OWNERSHIP):
        logger.warning("Rejected %s: %s (%s)", kind, code, message)

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
            kind=kind,
        ),
        status=http_status,
        headers=response.headers,
    )
