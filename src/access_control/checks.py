"""System checks for guard ordering on API views."""

from django.core.checks import Error, register

from access_control.permissions import IsAdminRole, IsAuthenticatedPrincipal


def _views_with_permissions(resolver, seen=None):
    """Yield view classes reachable from the URL resolver."""
    seen = set() if seen is None else seen
    for pattern in resolver.url_patterns:
        if hasattr(pattern, "url_patterns"):
            yield from _views_with_permissions(pattern, seen)
            continue
        view_cls = getattr(pattern.callback, "cls", None) or getattr(pattern.callback, "view_class", None)
        if view_cls is not None and view_cls not in seen:
            seen.add(view_cls)
            yield view_cls


def guard_order_errors(view_classes) -> list[Error]:
    """Return errors for views whose admin guard is not preceded by the auth guard."""

    errors: list[Error] = []
    for view_cls in view_classes:
        guards = list(getattr(view_cls, "permission_classes", []))
        if IsAdminRole not in guards:
            continue
        admin_index = guards.index(IsAdminRole)
        if IsAuthenticatedPrincipal not in guards[:admin_index]:
            errors.append(
                Error(
                    f"{view_cls.__name__} uses IsAdminRole without IsAuthenticatedPrincipal "
                    f"listed before it.",
                    obj=view_cls,
                    id="access_control.E001",
                )
            )
    return errors


@register()
def admin_guards_follow_authentication(app_configs, **kwargs):
    """Ensure every admin-only view authenticates the principal first."""

    # Import here to avoid loading URLconfs at module import time.
    from django.urls import get_resolver

    return guard_order_errors(_views_with_permissions(get_resolver()))
