"""Serializers for authentication flows (register, login, profile)."""

from typing import cast

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from core.exceptions import Conflict
from .managers import UserManager
from .models import Role

User = get_user_model()


def _ensure_unique(field: str, value: str, exclude_pk=None) -> None:
    """Raise 409 when another account already uses ``value`` for ``field``."""
    queryset = User.objects.filter(**{f"{field}__iexact": value})
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    if queryset.exists():
        raise Conflict(f"A user with this {field} already exists.")


def _validate_username_shape(value: str) -> str:
    # Emails always contain "@", so a username can never shadow an email login.
    if "@" in value:
        raise serializers.ValidationError("Usernames may not contain '@'.")
    return value


def _save_account(save):
    """Run ``save`` and report a unique-constraint race as a conflict."""
    try:
        with transaction.atomic():
            return save()
    except IntegrityError as exc:
        raise Conflict("A user with this username or email already exists.") from exc


class RegisterSerializer(serializers.Serializer):
    """Validate and create a reader account with the default 'user' role."""

    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    firstName = serializers.CharField(source="first_name", required=False, allow_blank=True, max_length=150)
    lastName = serializers.CharField(source="last_name", required=False, allow_blank=True, max_length=150)

    # noinspection PyMethodMayBeStatic
    def validate_username(self, value):
        return _validate_username_shape(value)

    def validate(self, attrs):
        """Reject taken usernames or emails with a conflict rather than a 400."""
        _ensure_unique("username", attrs["username"])
        _ensure_unique("email", attrs["email"])
        return attrs

    def create(self, validated_data):
        manager = cast(UserManager, User.objects)
        return _save_account(lambda: manager.create_user(**validated_data))


class LoginSerializer(serializers.Serializer):
    """Authenticate by email or username plus password using bcrypt verification."""

    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """Authenticate credentials and attach the user to validated_data."""
        email = (attrs.get("email") or "").strip()
        username = (attrs.get("username") or "").strip()
        if email:
            user = User.objects.filter(email__iexact=email).first()
        elif username:
            user = User.objects.filter(username=username).first()
        else:
            raise serializers.ValidationError("Email or username is required.")

        # Same message for unknown accounts and wrong passwords.
        if user is None or not UserManager.verify_password(user, attrs["password"]):
            raise AuthenticationFailed("Invalid credentials")
        if not user.is_active:
            raise AuthenticationFailed("User is inactive")

        attrs["user"] = user
        return attrs


class UserDetailSerializer(serializers.ModelSerializer):
    """Read-only user profile payload for responses."""

    firstName = serializers.CharField(source="first_name")
    lastName = serializers.CharField(source="last_name")
    dateJoined = serializers.DateTimeField(source="date_joined")

    class Meta:
        """Expose identity fields and the role; the password hash never leaves the model."""
        model = User
        fields = [
            "id",
            "username",
            "email",
            "role",
            "firstName",
            "lastName",
            "avatar",
            "dateJoined",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may change on their own account.

    The role is absent: only an admin (through ``POST /users/``) or the
    ``seed_admin`` command decides it.
    """

    firstName = serializers.CharField(source="first_name", required=False, allow_blank=True, max_length=150)
    lastName = serializers.CharField(source="last_name", required=False, allow_blank=True, max_length=150)
    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta:
        """Partial updates of identity and profile fields."""
        model = User
        fields = ["username", "email", "firstName", "lastName", "avatar", "password"]
        extra_kwargs = {
            "username": {"required": False, "validators": []},
            "email": {"required": False, "validators": []},
            "avatar": {"required": False},
        }

    def validate_username(self, value):
        _validate_username_shape(value)
        _ensure_unique("username", value, exclude_pk=self.instance.pk)
        return value

    def validate_email(self, value):
        _ensure_unique("email", value, exclude_pk=self.instance.pk)
        return value

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        if password:
            instance.set_password(password)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        _save_account(instance.save)
        return instance


class AdminUserCreateSerializer(RegisterSerializer):
    """Account creation by an admin, who may also pick the role and avatar."""

    role = serializers.ChoiceField(choices=Role.choices, required=False, default=Role.USER)
    avatar = serializers.URLField(required=False, allow_blank=True, max_length=500)


__all__ = [
    "AdminUserCreateSerializer",
    "LoginSerializer",
    "ProfileUpdateSerializer",
    "RegisterSerializer",
    "UserDetailSerializer",
]
