"""Permission guards for the API views.

The app has no models; loading it registers the system check that verifies
every admin-only view authenticates the principal before checking its role.
"""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"
    verbose_name = "Access control"

    def ready(self) -> None:
        from . import checks  # noqa: F401
