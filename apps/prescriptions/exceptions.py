# apps/prescriptions/exceptions.py
"""
Failure taxonomy for the prescription workflow.

Each error carries a stable ``kind`` that the API exception handler copies
into the response body next to a human-readable ``detail``.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class WorkflowError(APIException):
    kind = "workflow_error"


class ValidationError(WorkflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid prescription data."
    default_code = kind = "validation_error"


class NotFoundError(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = kind = "not_found"


class ForbiddenError(WorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."
    default_code = kind = "forbidden"


class InvalidStateError(WorkflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This transition is not allowed from the current status."
    default_code = kind = "invalid_state"
