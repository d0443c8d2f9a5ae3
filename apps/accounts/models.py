from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import DEFERRED


class User(AbstractUser):
    """
    Project user model.
    - display_name: lightweight label you can show in UI
    - role: exactly one of doctor / patient / pharmacist, fixed at creation
    """

    class Role(models.TextChoices):
        DOCTOR = "doctor", "Doctor"
        PATIENT = "patient", "Patient"
        PHARMACIST = "pharmacist", "Pharmacist"

    display_name = models.CharField(max_length=150, blank=True, default="")
    role = models.CharField(max_length=20, choices=Role.choices)

    REQUIRED_FIELDS = ["email", "role"]

    class Meta:
        indexes = [models.Index(fields=["role"], name="accounts_user_role_idx")]

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        # remember the stored role so save() can refuse a change
        role = dict(zip(field_names, values)).get("role", DEFERRED)
        instance._loaded_role = None if role is DEFERRED else role
        return instance

    def save(self, *args, **kwargs):
        if self.role not in self.Role.values:
            raise ValidationError({"role": "Role must be one of: " + ", ".join(self.Role.values) + "."})
        loaded = getattr(self, "_loaded_role", None)
        if self.pk and loaded is not None and loaded != self.role:
            raise ValidationError({"role": "Role cannot be changed after creation."})
        super().save(*args, **kwargs)
        self._loaded_role = self.role

    @property
    def name(self) -> str:
        return self.display_name or self.get_full_name() or self.username

    def __str__(self) -> str:  # type: ignore[override]
        return self.name
