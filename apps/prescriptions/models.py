# apps/prescriptions/models.py
from django.conf import settings
from django.db import models


class PrescriptionStatus(models.TextChoices):
    CREATED = "created", "Created"
    DISPENSED = "dispensed", "Dispensed"
    COMPLETED = "completed", "Completed"


class PrescriptionQuerySet(models.QuerySet):
    def with_related(self) -> "PrescriptionQuerySet":
        return self.select_related("patient", "doctor").prefetch_related("items__medicine")

    def pending(self) -> "PrescriptionQuerySet":
        return self.filter(status=PrescriptionStatus.CREATED)


class Prescription(models.Model):
    Status = PrescriptionStatus

    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="prescriptions_received",
    )
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="prescriptions_written",
    )
    notes = models.TextField(blank=True, default="")
    # Only advanced by apps.prescriptions.workflow
    status = models.CharField(
        max_length=10,
        choices=PrescriptionStatus.choices,
        default=PrescriptionStatus.CREATED,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PrescriptionQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["status"], name="rx_status_idx"),
            models.Index(fields=["doctor", "created_at"], name="rx_doctor_created_idx"),
            models.Index(fields=["patient", "created_at"], name="rx_patient_created_idx"),
        ]
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Rx #{self.pk} for {self.patient} ({self.status})"


class PrescriptionItem(models.Model):
    """One medicine line. Written once with its prescription, never edited."""

    prescription = models.ForeignKey(
        Prescription, on_delete=models.CASCADE, related_name="items"
    )
    medicine = models.ForeignKey(
        "medicines.Medicine", on_delete=models.PROTECT, related_name="prescription_items"
    )
    dosage = models.CharField(max_length=200)
    frequency = models.CharField(max_length=200)
    duration = models.CharField(max_length=200)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self):
        return f"{self.medicine} · {self.dosage}, {self.frequency}, {self.duration}"
