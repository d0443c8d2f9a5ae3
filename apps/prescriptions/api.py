# apps/prescriptions/api.py
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.filters import OrderingFilter

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiParameter,
)
from drf_spectacular.types import OpenApiTypes

from apps.audit.utils import log_event

from . import workflow
from .models import PrescriptionStatus
from .schemas import CreatePrescriptionExample, ErrorResponseSerializer, InvalidStateExample
from .serializers import PrescriptionCreateSerializer, PrescriptionSerializer


@extend_schema_view(
    list=extend_schema(
        summary="List prescriptions visible to me (paginated)",
        description=(
            "Doctors see the prescriptions they wrote, patients their own, pharmacists all. "
            "Optional `status` filter."
        ),
        parameters=[
            OpenApiParameter(name="status", required=False, type=OpenApiTypes.STR, enum=PrescriptionStatus.values),
            OpenApiParameter(name="sort", required=False, type=OpenApiTypes.STR),
            OpenApiParameter(name="limit", required=False, type=OpenApiTypes.INT),
            OpenApiParameter(name="offset", required=False, type=OpenApiTypes.INT),
        ],
    ),
    retrieve=extend_schema(
        summary="Get prescription",
        description="Allowed for its doctor, its patient, or any pharmacist. Emits `rx.view` audit.",
        responses={200: PrescriptionSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    ),
    create=extend_schema(
        summary="Create prescription (doctor)",
        description="Status starts at `created`. Every medicine line needs medicine, dosage, frequency and duration.",
        request=PrescriptionCreateSerializer,
        examples=[CreatePrescriptionExample],
        responses={
            201: PrescriptionSerializer,
            400: ErrorResponseSerializer,
            403: ErrorResponseSerializer,
            404: ErrorResponseSerializer,
        },
    ),
)
class PrescriptionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    I expose the prescription lifecycle. Role and ownership rules live in
    apps.prescriptions.workflow; this layer only translates HTTP.
    """
    schema_tags = ["Prescriptions"]
    serializer_class = PrescriptionSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [OrderingFilter]
    ordering_fields = ["created_at", "updated_at", "status"]
    ordering = ["-created_at", "-id"]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        return workflow.prescriptions_visible_to(self.request.user)

    # ---- list ----
    def list(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        st = request.query_params.get("status")
        if st:
            qs = qs.filter(status=st)
        log_event(request, "rx.list", "Prescription", st or "")

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PrescriptionSerializer(page, many=True).data)
        return Response(PrescriptionSerializer(qs, many=True).data)

    # ---- retrieve ----
    def retrieve(self, request, pk=None, *args, **kwargs):
        rx = workflow.get_prescription(request.user, pk)
        log_event(request, "rx.view", "Prescription", rx.id)
        return Response(PrescriptionSerializer(rx).data)

    # ---- create ----
    def create(self, request, *args, **kwargs):
        ser = PrescriptionCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data

        rx = workflow.create_prescription(
            request.user,
            patient_id=vd["patient"],
            lines=vd["medicines"],
            notes=vd.get("notes", ""),
        )
        log_event(request, "rx.create", "Prescription", rx.id)
        return Response(PrescriptionSerializer(rx).data, status=status.HTTP_201_CREATED)

    # ---- dispense ----
    @extend_schema(
        methods=["PUT"],
        summary="Dispense prescription (pharmacist)",
        description=(
            "Moves `created` → `dispensed` and takes one unit of stock per medicine line "
            "(lines whose medicine is out of stock are skipped). All-or-nothing."
        ),
        request=None,
        examples=[InvalidStateExample],
        responses={
            200: PrescriptionSerializer,
            400: ErrorResponseSerializer,
            403: ErrorResponseSerializer,
            404: ErrorResponseSerializer,
        },
    )
    @action(detail=True, methods=["put"], url_path="dispense")
    def dispense(self, request, pk=None):
        rx = workflow.dispense_prescription(request.user, pk)
        log_event(request, "rx.dispense", "Prescription", rx.id)
        return Response(PrescriptionSerializer(rx).data)

    # ---- complete ----
    @extend_schema(
        methods=["PUT"],
        summary="Confirm receipt (owning patient)",
        description="Moves `dispensed` → `completed`. Only the prescription's patient may do this.",
        request=None,
        responses={
            200: PrescriptionSerializer,
            400: ErrorResponseSerializer,
            403: ErrorResponseSerializer,
            404: ErrorResponseSerializer,
        },
    )
    @action(detail=True, methods=["put"], url_path="complete")
    def complete(self, request, pk=None):
        rx = workflow.complete_prescription(request.user, pk)
        log_event(request, "rx.complete", "Prescription", rx.id)
        return Response(PrescriptionSerializer(rx).data)

    # ---- pharmacist work queue ----
    @extend_schema(
        methods=["GET"],
        summary="Pending prescriptions (pharmacist)",
        description="Prescriptions still waiting to be dispensed, newest first.",
        responses={200: PrescriptionSerializer(many=True), 403: ErrorResponseSerializer},
    )
    @action(detail=False, methods=["get"], url_path="pending")
    def pending(self, request):
        qs = workflow.pending_prescriptions(request.user)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PrescriptionSerializer(page, many=True).data)
        return Response(PrescriptionSerializer(qs, many=True).data)
