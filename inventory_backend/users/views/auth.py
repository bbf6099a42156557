import logging

from django.contrib.auth import authenticate, login, logout
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.serializers import LoginSerializer, UserSerializer

logger = logging.getLogger("inventory.users")


# ---------------------------
# VIEWS
# ---------------------------


class LoginView(APIView):
    """
    Email + password login.

    On success a Django session is created; the session cookie
    authenticates every later request (SessionAuthentication).
    """

    permission_classes = [AllowAny]
    serializer_class = LoginSerializer

    @extend_schema(
        request=LoginSerializer,
        responses={200: UserSerializer},
        description="Authenticate with email and password and start a session",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data["email"]
        user = authenticate(
            request=request,
            email=email,
            password=serializer.validated_data["password"],
        )

        if not user:
            logger.warning("Failed login attempt", extra={"email": email})
            return Response(
                {"detail": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        login(request._request, user)
        logger.info("User logged in", extra={"user_id": str(user.pk)})
        return Response(UserSerializer(user).data)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={204: None}, description="End the current session")
    def post(self, request):
        user_id = str(request.user.pk)
        logout(request._request)
        logger.info("User logged out", extra={"user_id": user_id})
        return Response(status=status.HTTP_204_NO_CONTENT)
