"""Token service for credential issuance, verification, and transport."""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed


class CredentialError(AuthenticationFailed):
    """Base class for credential verification failures."""

    kind = "invalid"
    default_detail = "Invalid credential."


class NoCredential(CredentialError):
    kind = "no_credential"
    default_detail = "No credential provided."


class ExpiredCredential(CredentialError):
    kind = "expired"
    default_detail = "Token has expired."


class MalformedCredential(CredentialError):
    kind = "malformed"
    default_detail = "Malformed token."


class InvalidSignature(CredentialError):
    kind = "invalid_signature"
    default_detail = "Token signature is invalid."


class TokenService:
    """Issue and verify signed, time-bound identity assertions.

    A credential is an HS256 JWT carrying ``sub`` (principal id), ``role``,
    ``iat`` and ``exp``. Clients may present it either as a bearer token in
    the ``Authorization`` header or through the auth cookie set at login;
    both transports end up in :meth:`verify`.
    """

    ALGORITHM = "HS256"
    REQUIRED_CLAIMS = ("sub", "iat", "exp")

    @classmethod
    def ttl(cls) -> timedelta:
        return timedelta(hours=settings.TOKEN_TTL_HOURS)

    @classmethod
    def issue(cls, principal_id, role: str, issued_at: datetime | None = None) -> str:
        """Return a signed credential for the principal valid for ``ttl()``."""

        now = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": str(principal_id),
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int((now + cls.ttl()).timestamp()),
        }
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=cls.ALGORITHM)

    @classmethod
    def issue_for(cls, user) -> str:
        """Issue a credential for a persisted user."""
        return cls.issue(user.id, user.role)

    @classmethod
    def verify(cls, token: str | None) -> dict[str, Any]:
        """Decode and validate a credential, mapping failures to distinct kinds."""

        if not token:
            raise NoCredential()

        try:
            return jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[cls.ALGORITHM],
                options={"require": list(cls.REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredCredential() from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature() from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedCredential() from exc

    @staticmethod
    def extract(request) -> str | None:
        """Return the credential carried by the request, header first then cookie."""

        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1].strip()
            if token:
                return token
        return request.COOKIES.get(settings.AUTH_COOKIE_NAME) or None

    @classmethod
    def set_cookie(cls, response, token: str) -> None:
        """Attach the credential as an HttpOnly cookie alongside the JSON body."""

        response.set_cookie(
            settings.AUTH_COOKIE_NAME,
            token,
            max_age=int(cls.ttl().total_seconds()),
            httponly=True,
            secure=settings.AUTH_COOKIE_SECURE,
            samesite=settings.AUTH_COOKIE_SAMESITE,
        )

    @staticmethod
    def clear_cookie(response) -> None:
        response.delete_cookie(settings.AUTH_COOKIE_NAME, samesite=settings.AUTH_COOKIE_SAMESITE)


__all__ = [
    "CredentialError",
    "ExpiredCredential",
    "InvalidSignature",
    "MalformedCredential",
    "NoCredential",
    "TokenService",
]
