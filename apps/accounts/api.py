# apps/accounts/api.py
from rest_framework import serializers
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.filters import OrderingFilter, SearchFilter

from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.rbac.permissions import roles_required

from .models import User
from .serializers import CurrentUserSerializer, UserSummarySerializer


class WhoAmISerializer(serializers.Serializer):
    is_authenticated = serializers.BooleanField()
    id = serializers.IntegerField(required=False)
    username = serializers.CharField(required=False)
    email = serializers.EmailField(required=False)
    display_name = serializers.CharField(required=False, allow_blank=True)
    role = serializers.CharField(required=False)
    roles = serializers.ListField(child=serializers.CharField(), required=False)


@extend_schema(
    summary="Who am I",
    description=(
        "I return the current principal and its role. If anonymous, I return `is_authenticated=false`."
    ),
    responses={200: WhoAmISerializer},
)
class WhoAmIView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        if not request.user.is_authenticated:
            return Response({"is_authenticated": False})

        payload = {"is_authenticated": True, **CurrentUserSerializer(request.user).data}
        return Response(payload)


@extend_schema(
    summary="Patient directory",
    description="Doctors pick the patient for a new prescription from here. Supports `q` search.",
    parameters=[
        OpenApiParameter(name="q", description="Search username/name/email", required=False, type=OpenApiTypes.STR),
    ],
    responses={200: UserSummarySerializer(many=True)},
)
class PatientDirectoryView(ListAPIView):
    serializer_class = UserSummarySerializer
    permission_classes = [IsAuthenticated, roles_required("doctor")]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["username", "display_name", "first_name", "last_name", "email"]
    ordering_fields = ["display_name", "username", "id"]
    ordering = ["display_name", "username", "id"]

    def get_queryset(self):
        return User.objects.filter(role=User.Role.PATIENT, is_active=True)
