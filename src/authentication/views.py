"""Account endpoints: register, login, logout, profile, and admin user management."""

import logging
from typing import Any

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.exceptions import AuthenticationFailed, NotFound

from access_control.permissions import ADMIN_ONLY, AUTHENTICATED_ONLY
from core.response import BaseAPIView, api_response, message_response
from .serializers import (
    AdminUserCreateSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserDetailSerializer,
)
from .services import TokenService

logger = logging.getLogger(__name__)

User = get_user_model()


class TokenResponseSerializer(serializers.Serializer):
    """Documentation shape for register/login responses."""

    token = serializers.CharField()
    user = UserDetailSerializer()


class MessageSerializer(serializers.Serializer):
    message = serializers.CharField()


def _credential_response(user, status_code: int = status.HTTP_200_OK):
    """Issue a token for ``user`` and return it in the body and as a cookie."""
    token = TokenService.issue_for(user)
    response = api_response({"token": token, "user": UserDetailSerializer(user).data}, status=status_code)
    TokenService.set_cookie(response, token)
    return response


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = []

    @extend_schema(request=RegisterSerializer, responses={201: TokenResponseSerializer})
    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Register a new reader account and sign it in."""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s registered", user.pk)
        return _credential_response(user, status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    @extend_schema(request=LoginSerializer, responses=TokenResponseSerializer)
    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Authenticate by email or username and issue a credential."""
        serializer = LoginSerializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except AuthenticationFailed:
            logger.info("Failed login attempt")
            raise
        user = serializer.validated_data["user"]
        logger.info("User %s logged in", user.pk)
        return _credential_response(user)


class LogoutView(BaseAPIView):
    """Clear the credential cookie. Bearer tokens expire on their own."""

    permission_classes: list[Any] = []

    @extend_schema(request=None, responses=MessageSerializer)
    # noinspection PyMethodMayBeStatic
    def post(self, request):
        response = message_response("Logged out successfully")
        TokenService.clear_cookie(response)
        return response


class ProfileView(BaseAPIView):
    permission_classes = AUTHENTICATED_ONLY

    @extend_schema(responses=UserDetailSerializer)
    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current user's profile."""
        return api_response(UserDetailSerializer(request.user).data)

    @extend_schema(request=ProfileUpdateSerializer, responses=UserDetailSerializer)
    # noinspection PyMethodMayBeStatic
    def put(self, request):
        """Update profile fields for the current user."""
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return api_response(UserDetailSerializer(user).data)


class UpdateProfileView(ProfileView):
    http_method_names = ["put", "options"]


class UserListView(BaseAPIView):
    permission_classes = ADMIN_ONLY

    @extend_schema(responses=UserDetailSerializer(many=True))
    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """List every account, newest first (admin only)."""
        users = User.objects.order_by("-date_joined")
        return api_response(UserDetailSerializer(users, many=True).data)

    @extend_schema(request=AdminUserCreateSerializer, responses={201: UserDetailSerializer})
    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Create an account with any role (admin only). No credential is issued."""
        serializer = AdminUserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s created with role %s by %s", user.pk, user.role, request.user.pk)
        return api_response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class DeletedUserSerializer(serializers.Serializer):
    message = serializers.CharField()
    userId = serializers.UUIDField()


class UserDetailView(BaseAPIView):
    permission_classes = ADMIN_ONLY

    @extend_schema(responses=DeletedUserSerializer)
    # noinspection PyMethodMayBeStatic
    def delete(self, request, pk):
        """Permanently remove an account and its likes (admin only)."""
        deleted, _ = User.objects.filter(pk=pk).delete()
        if not deleted:
            raise NotFound("User not found.")
        logger.info("User %s deleted by %s", pk, request.user.pk)
        return api_response({"message": "User deleted successfully", "userId": str(pk)})


__all__ = [
    "LoginView",
    "LogoutView",
    "ProfileView",
    "RegisterView",
    "UpdateProfileView",
    "UserDetailView",
    "UserListView",
]
