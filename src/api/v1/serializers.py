"""Serializers for the account endpoints of API v1."""
from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


class MeSerializer(serializers.ModelSerializer):
    """Serializer for the authenticated user's own profile (GET/PATCH).

    ``home_zone`` is the zone a zone user or manager is restricted to.
    """

    home_zone = serializers.IntegerField(source="home_zone_id", read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'short_form', 'phone', 'role',
            'home_zone', 'is_active', 'is_superuser',
        ]
        read_only_fields = ['id', 'email', 'role', 'home_zone', 'is_active', 'is_superuser']


# ---------------------------------------------------------------------------
# Custom JWT Serializer (includes user data in token response)
# ---------------------------------------------------------------------------

class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Extends JWT token response to include user profile data."""

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = MeSerializer(self.user).data
        return data
