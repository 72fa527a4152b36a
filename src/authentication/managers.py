"""Account creation and bcrypt password handling."""

import uuid

import bcrypt
from django.conf import settings
from django.contrib.auth.base_user import BaseUserManager


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, username: str, email: str, password: str, **extra_fields):
        if not username:
            raise ValueError("A username is required")
        if not email:
            raise ValueError("An email address is required")
        user = self.model(
            id=uuid.uuid4(),
            username=username.strip(),
            email=self.normalize_email(email),
            **extra_fields,
        )
        user.password_hash = self.hash_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, username: str, email: str, password: str | None = None, **extra_fields):
        """Create a reader account; the role is always ``user`` unless given."""
        if not password:
            raise ValueError("A password is required")
        extra_fields.setdefault("role", "user")
        return self._create_user(username, email, password, **extra_fields)

    def create_superuser(self, username: str, email: str, password: str, **extra_fields):
        """Create an admin account (``createsuperuser`` and ``seed_admin``)."""
        extra_fields["role"] = "admin"
        extra_fields.setdefault("is_active", True)
        return self._create_user(username, email, password, **extra_fields)

    @staticmethod
    def hash_password(raw_password: str) -> str:
        salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
        return bcrypt.hashpw(raw_password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """Check ``raw_password`` against the user's stored hash; unusable hashes never match."""
        if not user.password_hash or raw_password is None:
            return False
        try:
            return bcrypt.checkpw(raw_password.encode("utf-8"), user.password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash.
            return False


__all__ = ["UserManager"]
