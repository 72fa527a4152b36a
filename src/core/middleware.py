"""Middleware resolving the request principal from a bearer token or auth cookie."""

import logging
from typing import Optional

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.deprecation import MiddlewareMixin
from rest_framework.exceptions import AuthenticationFailed

from authentication.models import User
from authentication.services import CredentialError, TokenService

logger = logging.getLogger(__name__)


class CredentialMiddleware(MiddlewareMixin):
    """Verify the request credential and attach ``request.user``.

    The middleware never rejects a request on its own: public endpoints must
    keep working with a stale cookie. On any failure the request gets an
    ``AnonymousUser`` plus ``request.credential_error``, and the permission
    guards turn that into a 401 for protected views.
    """

    def process_request(self, request):  # type: ignore[override]
        """Authenticate the request if it carries a credential."""
        request.user = AnonymousUser()
        request.credential_error = None

        token = TokenService.extract(request)
        try:
            payload = TokenService.verify(token)
        except CredentialError as exc:
            request.credential_error = exc
            return None

        user = self._get_user(payload.get("sub"))
        if not user or not user.is_active:
            request.credential_error = AuthenticationFailed("User not found or inactive.")
            return None

        request.user = user
        return None

    @staticmethod
    def _get_user(user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, DjangoValidationError, ValueError):
            # Non-UUID subjects come from foreign tokens signed with our key.
            logger.info("Credential subject %r does not match a user", user_id)
            return None


__all__ = ["CredentialMiddleware"]
