# apps/prescriptions/serializers.py
from __future__ import annotations

from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from apps.medicines.serializers import MedicineSummarySerializer

from .models import Prescription, PrescriptionItem


class PrescriptionItemSerializer(serializers.ModelSerializer):
    medicine = MedicineSummarySerializer(read_only=True)

    class Meta:
        model = PrescriptionItem
        fields = ["medicine", "dosage", "frequency", "duration"]


class PrescriptionSerializer(serializers.ModelSerializer):
    # I resolve references to display fields so clients don't need extra lookups.
    patient = UserSummarySerializer(read_only=True)
    doctor = UserSummarySerializer(read_only=True)
    medicines = PrescriptionItemSerializer(source="items", many=True, read_only=True)

    class Meta:
        model = Prescription
        fields = [
            "id",
            "patient",
            "doctor",
            "medicines",
            "notes",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MedicineLineInputSerializer(serializers.Serializer):
    # Shape only; completeness and existence are checked by the workflow.
    medicine = serializers.IntegerField(required=False, allow_null=True)
    dosage = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    frequency = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    duration = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)


class PrescriptionCreateSerializer(serializers.Serializer):
    patient = serializers.IntegerField()
    medicines = MedicineLineInputSerializer(many=True, allow_empty=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
