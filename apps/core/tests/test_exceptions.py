import pytest
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import OperationalError
from django.http import Http404
from rest_framework import exceptions

from apps.core.exceptions import api_exception_handler
from apps.prescriptions.exceptions import InvalidStateError, ValidationError


def test_workflow_error_keeps_its_kind():
    res = api_exception_handler(InvalidStateError("Prescription cannot be marked as completed yet."), {})

    assert res.status_code == 400
    assert res.data == {"kind": "invalid_state", "detail": "Prescription cannot be marked as completed yet."}


def test_workflow_validation_uses_default_message():
    res = api_exception_handler(ValidationError(), {})

    assert res.status_code == 400
    assert res.data == {"kind": "validation_error", "detail": "Invalid prescription data."}


def test_serializer_errors_are_listed_per_field():
    exc = exceptions.ValidationError({"patient": ["A valid integer is required."]})

    res = api_exception_handler(exc, {})

    assert res.status_code == 400
    assert res.data["kind"] == "validation_error"
    assert res.data["detail"] == "Invalid input."
    assert res.data["errors"] == {"patient": ["A valid integer is required."]}


def test_drf_errors_are_mapped_to_kinds():
    assert api_exception_handler(exceptions.NotFound(), {}).data["kind"] == "not_found"
    assert api_exception_handler(exceptions.PermissionDenied(), {}).data["kind"] == "forbidden"
    assert api_exception_handler(exceptions.NotAuthenticated(), {}).data["kind"] == "not_authenticated"


def test_storage_errors_do_not_leak_driver_details(caplog):
    res = api_exception_handler(OperationalError("could not connect to server at 10.0.0.5"), {"view": None})

    assert res.status_code == 500
    assert res.data == {"kind": "server_error", "detail": "Server error."}
    assert "10.0.0.5" not in str(res.data)
    assert "storage failure" in caplog.text


def test_django_not_found_and_permission_denied_get_kinds():
    res = api_exception_handler(Http404("No Medicine matches the given query."), {})
    assert res.status_code == 404
    assert res.data["kind"] == "not_found"

    res = api_exception_handler(DjangoPermissionDenied(), {})
    assert res.status_code == 403
    assert res.data["kind"] == "forbidden"


def test_unexpected_errors_become_server_error(caplog):
    res = api_exception_handler(RuntimeError("boom"), {"view": None})

    assert res.status_code == 500
    assert res.data == {"kind": "server_error", "detail": "Server error."}
    assert "unhandled RuntimeError" in caplog.text
