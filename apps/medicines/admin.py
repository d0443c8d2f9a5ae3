from django.contrib import admin
from .models import Medicine


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "strength", "dosage_form", "manufacturer", "stock_quantity", "updated_at")
    list_filter = ("dosage_form", "manufacturer")
    search_fields = ("name", "manufacturer", "description")
    ordering = ("name",)
