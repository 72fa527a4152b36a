from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Accounts: the user model, password hashing, and credential issuance."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
    verbose_name = "Accounts"
