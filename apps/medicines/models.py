# apps/medicines/models.py
from django.db import models
from django.db.models import Q


class Medicine(models.Model):
    """
    Catalog entry. stock_quantity is only ever moved by dispensation
    (see services.take_one_unit) or by catalog edits in the admin.
    """
    name = models.CharField(max_length=200)
    description = models.TextField()
    dosage_form = models.CharField(max_length=100)
    strength = models.CharField(max_length=100)
    manufacturer = models.CharField(max_length=200)
    stock_quantity = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["name"], name="medicine_name_idx")]
        constraints = [
            models.CheckConstraint(
                name="medicine_stock_non_negative",
                condition=Q(stock_quantity__gte=0),
            ),
        ]
        ordering = ["name", "id"]

    def __str__(self) -> str:
        return f"{self.name} {self.strength} ({self.stock_quantity} in stock)"

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0
