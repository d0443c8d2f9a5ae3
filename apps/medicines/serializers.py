# apps/medicines/serializers.py
from rest_framework import serializers
from .models import Medicine


class MedicineSerializer(serializers.ModelSerializer):
    class Meta:
        model = Medicine
        fields = [
            "id",
            "name",
            "description",
            "dosage_form",
            "strength",
            "manufacturer",
            "stock_quantity",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MedicineSummarySerializer(serializers.ModelSerializer):
    # Display fields embedded in prescription lines.
    class Meta:
        model = Medicine
        fields = ["id", "name", "description", "dosage_form", "strength"]
