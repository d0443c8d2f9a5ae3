from django.contrib import admin
from .models import Prescription, PrescriptionItem


class PrescriptionItemInline(admin.TabularInline):
    model = PrescriptionItem
    extra = 0
    can_delete = False
    fields = ("position", "medicine", "dosage", "frequency", "duration")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    # Status moves only through the API workflow (stock side effects).
    list_display = ("id", "patient", "doctor", "status", "created_at", "updated_at")
    list_filter = ("status", "doctor")
    search_fields = ("patient__username", "patient__display_name", "doctor__username", "notes")
    readonly_fields = ("patient", "doctor", "status", "notes", "created_at", "updated_at")
    inlines = [PrescriptionItemInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
