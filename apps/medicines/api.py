# apps/medicines/api.py
from rest_framework import viewsets
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiParameter,
)
from drf_spectacular.types import OpenApiTypes

from .models import Medicine
from .serializers import MedicineSerializer


@extend_schema_view(
    list=extend_schema(
        summary="List/search medicines (paginated)",
        description="Read-only catalog. `q` searches name and manufacturer; `sort` orders.",
        parameters=[
            OpenApiParameter(name="q", required=False, type=OpenApiTypes.STR),
            OpenApiParameter(name="sort", required=False, type=OpenApiTypes.STR),
            OpenApiParameter(name="in_stock", description="Only medicines with stock > 0", required=False, type=OpenApiTypes.BOOL),
        ],
    ),
    retrieve=extend_schema(summary="Get medicine", responses={200: MedicineSerializer}),
)
class MedicineViewSet(viewsets.ReadOnlyModelViewSet):
    """
    I expose the catalog for lookups by id while composing prescriptions.
    Catalog edits happen in the admin.
    """
    schema_tags = ["Medicines"]
    queryset = Medicine.objects.all()
    serializer_class = MedicineSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["name", "manufacturer"]
    ordering_fields = ["name", "stock_quantity", "created_at"]
    ordering = ["name", "id"]

    def get_queryset(self):
        qs = super().get_queryset()
        if (self.request.query_params.get("in_stock") or "").lower() in {"true", "1", "yes"}:
            qs = qs.filter(stock_quantity__gt=0)
        return qs
