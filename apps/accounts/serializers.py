from rest_framework import serializers
from .models import User


class CurrentUserSerializer(serializers.ModelSerializer):
    roles = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "email", "display_name", "role", "roles")

    def get_roles(self, obj):
        # I keep the list shape so clients written against multi-role RBAC still work.
        return [obj.role] if obj.role else []


class UserSummarySerializer(serializers.ModelSerializer):
    name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ("id", "name", "email")
