"""App configuration for the articles (news) app."""

from django.apps import AppConfig


class ArticlesConfig(AppConfig):
    """Articles app holds the news store, query engine and ingestion."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "articles"

    def ready(self) -> None:
        from . import checks  # noqa: F401
