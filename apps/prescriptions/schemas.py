# apps/prescriptions/schemas.py
from rest_framework import serializers
from drf_spectacular.utils import OpenApiExample


# I describe the failure body every endpoint returns.
class ErrorResponseSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(
        choices=["validation_error", "not_found", "forbidden", "invalid_state", "not_authenticated", "server_error"]
    )
    detail = serializers.CharField()
    errors = serializers.DictField(required=False)


# ---- Swagger example payloads ----

CreatePrescriptionExample = OpenApiExample(
    "Create prescription",
    value={
        "patient": 7,
        "medicines": [
            {"medicine": 3, "dosage": "500 mg", "frequency": "3x daily", "duration": "7 days"},
            {"medicine": 5, "dosage": "10 ml", "frequency": "at night", "duration": "5 days"},
        ],
        "notes": "Take after meals.",
    },
    request_only=True,
)

InvalidStateExample = OpenApiExample(
    "Wrong status",
    value={"kind": "invalid_state", "detail": "Prescription already dispensed or completed."},
    response_only=True,
    status_codes=["400"],
)
