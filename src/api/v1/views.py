"""Account views of API v1."""
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from api.v1.serializers import CustomTokenObtainPairSerializer, MeSerializer


class TokenObtainView(TokenObtainPairView):
    """POST /api/v1/auth/token/ - JWT pair plus the user's profile."""

    serializer_class = CustomTokenObtainPairSerializer


class MeView(APIView):
    """
    GET /api/v1/auth/me/ - return the authenticated user's profile.
    PATCH /api/v1/auth/me/ - update name, short form, phone.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = MeSerializer(request.user)
        return Response(serializer.data)

    def patch(self, request):
        serializer = MeSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
