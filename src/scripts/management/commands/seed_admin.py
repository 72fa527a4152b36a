"""Provision the deployment admin account."""

from typing import cast

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from authentication.managers import UserManager
from authentication.models import Role


def provision_seed_admin(username: str, email: str, password: str) -> tuple[object, bool]:
    """Create the admin account, or promote and re-key an existing one.

    Returns ``(user, created)``.
    """
    User = get_user_model()
    with transaction.atomic():
        user = User.objects.select_for_update().filter(username=username).first()
        if user is None:
            manager = cast(UserManager, User.objects)
            return manager.create_superuser(username=username, email=email, password=password), True

        user.role = Role.ADMIN
        user.is_active = True
        user.set_password(password)
        user.save(update_fields=["role", "is_active", "password_hash", "updated_at"])
        return user, False


class Command(BaseCommand):
    """Management command to create or elevate the seed admin."""

    help = (
        "Create the admin account from SEED_ADMIN_* settings (or the options "
        "below). An existing account with the same username is promoted."
    )

    def add_arguments(self, parser):
        parser.add_argument("--username", default=None)
        parser.add_argument("--email", default=None)
        parser.add_argument("--password", default=None)

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        username = options.get("username") or settings.SEED_ADMIN_USERNAME
        email = options.get("email") or settings.SEED_ADMIN_EMAIL
        password = options.get("password") or settings.SEED_ADMIN_PASSWORD
        if not password:
            raise CommandError("Set SEED_ADMIN_PASSWORD or pass --password.")

        user, created = provision_seed_admin(username, email, password)
        verb = "Created" if created else "Promoted"
        self.stdout.write(self.style.SUCCESS(f"{verb} admin account {user.username}."))
