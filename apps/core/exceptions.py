# apps/core/exceptions.py
"""
DRF exception handler: every failure leaves the API as

    {"kind": "<machine-readable kind>", "detail": "<message>"}

plus "errors" with per-field messages for serializer validation failures.
Anything DRF does not handle itself (storage errors, bugs) is logged and
reported as a generic server error.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

# DRF built-ins -> kinds shared with apps.prescriptions.exceptions
KIND_BY_EXCEPTION = [
    (exceptions.ValidationError, "validation_error"),
    (exceptions.ParseError, "validation_error"),
    (exceptions.NotAuthenticated, "not_authenticated"),
    (exceptions.AuthenticationFailed, "not_authenticated"),
    (exceptions.PermissionDenied, "forbidden"),
    (exceptions.NotFound, "not_found"),
    (exceptions.MethodNotAllowed, "method_not_allowed"),
    (exceptions.Throttled, "throttled"),
]


def _as_api_exception(exc):
    # same translation DRF applies internally to Django's own exceptions
    if isinstance(exc, Http404):
        return exceptions.NotFound(*exc.args)
    if isinstance(exc, PermissionDenied):
        return exceptions.PermissionDenied(*exc.args)
    return exc


def _kind_for(exc) -> str:
    kind = getattr(exc, "kind", None)
    if kind:
        return kind
    for cls, name in KIND_BY_EXCEPTION:
        if isinstance(exc, cls):
            return name
    return "error"


def _server_error(exc, context):
    view = context.get("view")
    where = type(view).__name__ if view else "request"
    if isinstance(exc, DatabaseError):
        logger.error("storage failure in %s", where, exc_info=exc)
    else:
        logger.error("unhandled %s in %s", type(exc).__name__, where, exc_info=exc)
    return Response(
        {"kind": "server_error", "detail": "Server error."},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def api_exception_handler(exc, context):
    exc = _as_api_exception(exc)
    response = exception_handler(exc, context)
    if response is None:
        return _server_error(exc, context)

    data = response.data
    body = {"kind": _kind_for(exc)}
    if isinstance(data, dict) and "detail" in data:
        body["detail"] = data["detail"]
    else:
        # serializer errors: keep the per-field messages
        body["detail"] = "Invalid input."
        body["errors"] = data if isinstance(data, dict) else {"non_field_errors": data}
    response.data = body
    return response
