"""Shared helpers for tests (user creation, authenticated clients, articles)."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from articles.models import Article, Category
from authentication.managers import UserManager
from authentication.models import Role
from authentication.services import TokenService

User = get_user_model()


def create_user(username: str, password: str, role: str = Role.USER, **extra):
    """Create a user with a bcrypt-hashed password for tests."""

    extra.setdefault("email", f"{username}@example.com")
    return User.objects.create(
        username=username,
        password_hash=UserManager.hash_password(password),
        role=role,
        **extra,
    )


def auth_client(user) -> APIClient:
    """Return an APIClient carrying a bearer credential for ``user``."""

    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {TokenService.issue_for(user)}")
    return client


def create_article(title: str = "Headline", category: str = Category.TECHNOLOGY, **extra) -> Article:
    extra.setdefault("content", f"{title} body")
    extra.setdefault("description", f"{title} summary")
    return Article.objects.create(title=title, category=category, **extra)
