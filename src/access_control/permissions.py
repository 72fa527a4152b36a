"""Permission guards for authenticated-only and admin-only endpoints.

Guards compose through DRF's ``permission_classes`` and are evaluated in
order, so admin-only views list ``IsAuthenticatedPrincipal`` first and
``IsAdminRole`` second.
"""

from rest_framework import permissions
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated

from core.authentication import get_credential_error


def _is_authenticated(user) -> bool:
    return bool(user is not None and getattr(user, "is_authenticated", False))


class IsAuthenticatedPrincipal(permissions.BasePermission):
    """Allow only requests whose credential resolved to an active user.

    Fails closed: any recorded credential failure (missing, expired,
    malformed, bad signature, unknown user) is raised as a 401.
    """

    def has_permission(self, request, view) -> bool:
        if _is_authenticated(getattr(request, "user", None)):
            return True

        error = get_credential_error(request)
        if isinstance(error, AuthenticationFailed):
            raise error
        raise NotAuthenticated()


class IsAdminRole(permissions.BasePermission):
    """Allow only principals whose role is ``admin``.

    An unresolved principal is never treated as admin.
    """

    message = "You do not have permission to perform this action on this resource."

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not _is_authenticated(user):
            return False
        return getattr(user, "role", None) == "admin"


ADMIN_ONLY = [IsAuthenticatedPrincipal, IsAdminRole]
AUTHENTICATED_ONLY = [IsAuthenticatedPrincipal]

__all__ = ["ADMIN_ONLY", "AUTHENTICATED_ONLY", "IsAdminRole", "IsAuthenticatedPrincipal"]
