"""Filter, search, sort and pagination over articles.

Query parameters arrive as untrusted strings. :meth:`ArticleQuery.from_params`
coerces them: bad or non-positive ``page``/``limit`` fall back to the
defaults, ``limit`` is capped at ``NEWS_MAX_PAGE_SIZE``, ``page`` is capped so the
offset stays within the database integer range, and unknown sort
fields or directions fall back to newest-first. The page and the total are
computed from the same filtered queryset.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from django.conf import settings
from django.db.models import Q, QuerySet

from .models import Article, Category

# Public sort keys (camelCase as used by clients) mapped to model fields.
SORTABLE_FIELDS: dict[str, str] = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "views": "views",
    "title": "title",
}
DEFAULT_SORT = "createdAt"
DEFAULT_ORDER = "desc"
# Largest OFFSET the database accepts (signed 64-bit).
MAX_OFFSET = 2**63 - 1


def _positive_int(value: Any, default: int) -> int:
    """Return ``value`` as a positive int, or ``default`` for anything else."""
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


@dataclass(frozen=True)
class ArticleQuery:
    category: str | None = None
    search: str | None = None
    page: int = 1
    limit: int = 20
    sort_by: str = DEFAULT_SORT
    order: str = DEFAULT_ORDER

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ArticleQuery":
        """Build a query from request parameters, coercing invalid input."""
        default_limit = settings.NEWS_DEFAULT_PAGE_SIZE
        limit = min(_positive_int(params.get("limit"), default_limit), settings.NEWS_MAX_PAGE_SIZE)

        sort_by = params.get("sortBy") or DEFAULT_SORT
        if sort_by not in SORTABLE_FIELDS:
            sort_by = DEFAULT_SORT

        order = str(params.get("order") or DEFAULT_ORDER).lower()
        if order not in ("asc", "desc"):
            order = DEFAULT_ORDER

        page = min(_positive_int(params.get("page"), 1), (MAX_OFFSET - limit) // limit + 1)

        return cls(
            category=(params.get("category") or "").strip() or None,
            search=(params.get("search") or "").strip() or None,
            page=page,
            limit=limit,
            sort_by=sort_by,
            order=order,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def ordering(self) -> list[str]:
        prefix = "-" if self.order == "desc" else ""
        # Ties are broken by id so pages never overlap.
        return [f"{prefix}{SORTABLE_FIELDS[self.sort_by]}", f"{prefix}id"]

    def filter(self, queryset: QuerySet) -> QuerySet:
        if self.category:
            queryset = queryset.filter(category=self.category)
        if self.search:
            queryset = queryset.filter(
                Q(title__icontains=self.search)
                | Q(description__icontains=self.search)
                | Q(content__icontains=self.search)
            )
        return queryset


@dataclass
class Page:
    items: list[Article]
    page: int
    limit: int
    total: int
    pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.pages = math.ceil(self.total / self.limit) if self.total else 0

    @property
    def pagination(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


def paginate(query: ArticleQuery, queryset: QuerySet | None = None) -> Page:
    """Run ``query`` and return one bounded page plus the matching total."""

    if queryset is None:
        queryset = Article.objects.all()
    filtered = query.filter(queryset)
    total = filtered.count()
    items = list(
        filtered.order_by(*query.ordering).prefetch_related("likes")[
            query.offset : query.offset + query.limit
        ]
    )
    return Page(items=items, page=query.page, limit=query.limit, total=total)


def present_categories() -> list[str]:
    """Return the category members that currently have at least one article."""

    used = set(Article.objects.values_list("category", flat=True).order_by().distinct())
    return [category.value for category in Category if category.value in used]


__all__ = ["ArticleQuery", "MAX_OFFSET", "Page", "SORTABLE_FIELDS", "paginate", "present_categories"]
