"""Article model with view counter and per-user likes."""

from django.conf import settings
from django.db import models


class Category(models.TextChoices):
    """Closed set of article categories."""

    TECHNOLOGY = "Technology"
    SPORTS = "Sports"
    POLITICS = "Politics"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    BUSINESS = "Business"


class Article(models.Model):
    """News article published by an admin or pulled in by ingestion.

    ``likes`` is the authoritative record of who liked the article; the join
    table's unique (article, user) pair keeps it a set.
    """

    title = models.CharField(max_length=500, db_index=True)
    content = models.TextField()
    description = models.TextField()
    category = models.CharField(max_length=32, choices=Category.choices, db_index=True)
    image_url = models.URLField(max_length=1000, blank=True, default="")
    views = models.PositiveIntegerField(default=0)
    likes = models.ManyToManyField(
        settings.AUTH_USER_MODEL, related_name="liked_articles", blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title


__all__ = ["Article", "Category"]
