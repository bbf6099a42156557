# users/views/users.py

"""
USER MANAGEMENT

- list:     admin / manager (search over email + name, filter by role)
- retrieve: self, or admin / manager
- create:   admin
- update:   self (name + password via /auth/me/), admin for anyone
- delete:   admin, never self
"""

import logging

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_USERS_MANAGE,
    CAP_USERS_VIEW,
    HasAnyCapability,
    IsAdmin,
    capabilities_for,
)
from users.models import User
from users.serializers import (
    ProfileUpdateSerializer,
    UserCreateSerializer,
    UserSerializer,
    UserUpdateSerializer,
)

logger = logging.getLogger("inventory.users")


class UserViewSet(viewsets.ModelViewSet):
    serializer_class = UserSerializer

    def get_queryset(self):
        qs = User.objects.all().order_by("-created_at")

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(email__icontains=search) | Q(name__icontains=search))

        role = (self.request.query_params.get("role") or "").strip().lower()
        if role:
            qs = qs.filter(role=role)

        return qs

    def get_permissions(self):
        if self.action == "list":
            self.required_any_capabilities = {CAP_USERS_VIEW}
            return [IsAuthenticated(), HasAnyCapability()]

        if self.action == "create":
            self.required_any_capabilities = {CAP_USERS_MANAGE}
            return [IsAuthenticated(), HasAnyCapability()]
        if self.action == "destroy":
            return [IsAuthenticated(), IsAdmin()]

        # retrieve / update: object-level checks below
        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == "create":
            return UserCreateSerializer
        return UserSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("role", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("page", int, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        user = self.get_object()
        caps = capabilities_for(request.user)
        if not (caps.can(CAP_USERS_VIEW) or caps.owns_resource(user)):
            raise PermissionDenied("You can only view your own account.")
        return Response(UserSerializer(user).data)

    def create(self, request, *args, **kwargs):
        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(
            "User created",
            extra={"user_id": str(user.pk), "role": user.role, "by": str(request.user.pk)},
        )
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=UserUpdateSerializer, responses={200: UserSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        user = self.get_object()
        caps = capabilities_for(request.user)

        if caps.can(CAP_USERS_MANAGE):
            serializer = UserUpdateSerializer(user, data=request.data, partial=partial)
        elif caps.owns_resource(user):
            serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
        else:
            raise PermissionDenied("Only admins can update other users.")

        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data)

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.pk == request.user.pk:
            return Response(
                {"detail": "You cannot delete your own account."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        user_id = str(user.pk)
        user.delete()
        logger.info("User deleted", extra={"user_id": user_id, "by": str(request.user.pk)})
        return Response(status=status.HTTP_204_NO_CONTENT)
