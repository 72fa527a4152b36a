"""DRF side of credential handling.

Credentials are verified once per request by ``core.middleware.CredentialMiddleware``.
DRF still runs its own authentication classes when it builds ``Request.user``,
so the single class here only hands over what the middleware resolved.
"""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Report the middleware's principal to DRF; never parses a credential itself."""

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        user = getattr(request._request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        return user, None


def get_credential_error(request):
    """Return why the middleware could not resolve a principal, or ``None``.

    Accepts either a DRF ``Request`` or the underlying Django request.
    """
    django_request = getattr(request, "_request", request)
    return getattr(django_request, "credential_error", None)


__all__ = ["MiddlewareUserAuthentication", "get_credential_error"]
