"""Article store: persistence operations behind the news endpoints.

View increments are a single ``UPDATE ... SET views = views + 1``. Like
toggles run a delete-or-insert on the likes join table while holding the
article row, so concurrent requests on the same article never lose updates.
"""

from typing import Any

from django.conf import settings
from django.db import transaction
from django.db.models import F
from rest_framework.exceptions import NotFound, ValidationError

from .media import resolve_image_reference, store_upload
from .models import Article, Category
from .query import ArticleQuery, Page, paginate, present_categories

REQUIRED_FIELDS = ("title", "content", "description", "category")
TEXT_FIELDS = ("title", "content", "description")


def _validate_category(value: Any) -> str:
    if value not in Category.values:
        raise ValidationError(
            {"category": [f"Invalid category. Expected one of: {', '.join(Category.values)}."]}
        )
    return value


class ArticleStore:
    """Create/read/update/delete, like toggling and listing for articles."""

    NOT_FOUND = "News article not found."

    @classmethod
    def create(cls, fields: dict[str, Any], image=None, request=None) -> Article:
        """Validate and persist a new article, resolving its image reference."""

        missing = [name for name in REQUIRED_FIELDS if not str(fields.get(name) or "").strip()]
        if missing:
            raise ValidationError(
                {name: ["This field is required."] for name in missing}
            )
        category = _validate_category(fields["category"])

        image_url = resolve_image_reference(fields.get("image_url"), image, request)
        return Article.objects.create(
            title=fields["title"].strip(),
            content=fields["content"].strip(),
            description=fields["description"].strip(),
            category=category,
            image_url=image_url,
        )

    @classmethod
    def get(cls, pk) -> Article:
        try:
            return Article.objects.prefetch_related("likes").get(pk=pk)
        except Article.DoesNotExist:
            raise NotFound(cls.NOT_FOUND)

    @classmethod
    def read(cls, pk) -> Article:
        """Return the article after atomically incrementing its view counter."""

        updated = Article.objects.filter(pk=pk).update(views=F("views") + 1)
        if not updated:
            raise NotFound(cls.NOT_FOUND)
        return cls.get(pk)

    @classmethod
    def update(cls, pk, fields: dict[str, Any], image=None, request=None) -> Article:
        """Merge the supplied fields into the article; unsupplied fields stay unchanged."""

        article = cls.get(pk)
        changes: dict[str, Any] = {}
        for name in TEXT_FIELDS:
            if name in fields and fields[name] is not None:
                value = str(fields[name]).strip()
                if not value:
                    raise ValidationError({name: ["This field may not be blank."]})
                changes[name] = value
        if fields.get("category") is not None:
            changes["category"] = _validate_category(fields["category"])
        if fields.get("image_url"):
            changes["image_url"] = fields["image_url"].strip()
        elif image is not None:
            changes["image_url"] = store_upload(image, request)

        if changes:
            # Only the merged columns are written; views and likes are never
            # touched by an edit.
            for name, value in changes.items():
                setattr(article, name, value)
            article.save(update_fields=[*changes, "updated_at"])
        return article

    @classmethod
    def delete(cls, pk) -> None:
        deleted, _ = Article.objects.filter(pk=pk).delete()
        if not deleted:
            raise NotFound(cls.NOT_FOUND)

    @classmethod
    def toggle_like(cls, pk, principal) -> tuple[Article, bool]:
        """Like the article if the principal has not yet, else unlike it.

        Returns the refreshed article and whether the principal now likes it.
        """

        through = Article.likes.through
        with transaction.atomic():
            # Row lock on the article serializes toggles so each one flips the state once.
            if not Article.objects.select_for_update().filter(pk=pk).values_list("pk", flat=True):
                raise NotFound(cls.NOT_FOUND)
            removed, _ = through.objects.filter(article_id=pk, user_id=principal.pk).delete()
            liked = False
            if not removed:
                through.objects.bulk_create(
                    [through(article_id=pk, user_id=principal.pk)], ignore_conflicts=True
                )
                liked = True
        return cls.get(pk), liked

    @classmethod
    def unlike(cls, pk, principal) -> Article:
        """Remove the principal's like if present; repeated calls are no-ops."""

        cls._ensure_exists(pk)
        Article.likes.through.objects.filter(article_id=pk, user_id=principal.pk).delete()
        return cls.get(pk)

    @classmethod
    def list_articles(cls, query: ArticleQuery) -> Page:
        return paginate(query)

    @staticmethod
    def featured(limit: int | None = None) -> list[Article]:
        limit = limit or settings.NEWS_FEATURED_COUNT
        return list(Article.objects.order_by("-created_at", "-id").prefetch_related("likes")[:limit])

    @staticmethod
    def categories() -> list[str]:
        return present_categories()

    @classmethod
    def _ensure_exists(cls, pk) -> None:
        if not Article.objects.filter(pk=pk).exists():
            raise NotFound(cls.NOT_FOUND)


__all__ = ["ArticleStore", "REQUIRED_FIELDS"]
