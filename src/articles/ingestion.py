"""Pull top headlines from NewsAPI into the article store.

Each category is mapped to the provider's own vocabulary through
``PROVIDER_CATEGORY_MAP``. Articles are inserted only when no article with the
same title exists, so re-running the ingestion is a no-op for titles already
seen. A provider failure for one category is logged and the remaining
categories are still processed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

import requests
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import transaction

from .models import Article, Category

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = Article._meta.get_field("title").max_length
IMAGE_URL_MAX_LENGTH = Article._meta.get_field("image_url").max_length

# NewsAPI has no "politics" category; political headlines live under "general".
PROVIDER_CATEGORY_MAP: dict[str, str] = {
    Category.TECHNOLOGY: "technology",
    Category.SPORTS: "sports",
    Category.POLITICS: "general",
    Category.ENTERTAINMENT: "entertainment",
    Category.HEALTH: "health",
    Category.BUSINESS: "business",
}


class UnmappedCategoryError(ImproperlyConfigured):
    """A category has no entry in the provider vocabulary table."""


class UpstreamError(Exception):
    """The news provider could not be reached or returned an unusable response."""


def provider_category(category: str) -> str:
    try:
        return PROVIDER_CATEGORY_MAP[category]
    except KeyError:
        raise UnmappedCategoryError(f"No provider category mapped for {category!r}") from None


def unmapped_categories(categories: Iterable[str] | None = None) -> list[str]:
    categories = Category.values if categories is None else categories
    return [category for category in categories if category not in PROVIDER_CATEGORY_MAP]


@dataclass
class IngestionResult:
    total_fetched: int = 0
    total_inserted: int = 0

    def as_dict(self) -> dict[str, int]:
        return {"totalFetched": self.total_fetched, "totalInserted": self.total_inserted}


class NewsApiClient:
    """Minimal client for the NewsAPI ``top-headlines`` endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        country: str | None = None,
        page_size: int | None = None,
        timeout: int | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key or settings.NEWS_API_KEY
        if not self.api_key:
            raise ImproperlyConfigured("NEWS_API_KEY must be set to ingest news")
        self.base_url = base_url or settings.NEWS_API_URL
        self.country = country or settings.NEWS_API_COUNTRY
        self.page_size = page_size or settings.NEWS_API_PAGE_SIZE
        self.timeout = timeout or settings.NEWS_API_TIMEOUT
        self.session = session or requests.Session()

    def top_headlines(self, category: str) -> list[dict[str, Any]]:
        """Return the raw article dicts for one provider category."""

        params = {
            "country": self.country,
            "category": category,
            "pageSize": self.page_size,
            "apiKey": self.api_key,
        }
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.HTTPError as exc:
            # The request URL carries the API key, so only the status is reported.
            raise UpstreamError(
                f"NewsAPI returned HTTP {getattr(exc.response, 'status_code', None)} for {category!r}"
            ) from exc
        except requests.RequestException as exc:
            raise UpstreamError(
                f"NewsAPI request for {category!r} failed: {type(exc).__name__}"
            ) from exc
        except ValueError as exc:
            raise UpstreamError(f"NewsAPI returned invalid JSON for {category!r}") from exc

        articles = payload.get("articles") if isinstance(payload, dict) else None
        return articles if isinstance(articles, list) else []


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize(item: dict[str, Any], category: str) -> dict[str, str] | None:
    """Map a provider article onto article fields; ``None`` when it has no title."""

    title = _clean(item.get("title"))[:TITLE_MAX_LENGTH]
    if not title:
        return None
    description = _clean(item.get("description"))
    image_url = _clean(item.get("urlToImage"))
    return {
        "title": title,
        "description": description,
        "content": _clean(item.get("content")) or description,
        "category": category,
        "image_url": image_url if len(image_url) <= IMAGE_URL_MAX_LENGTH else "",
    }


def insert_if_new(fields: dict[str, str]) -> bool:
    """Insert the article unless one with the same title exists; return whether inserted."""

    with transaction.atomic():
        if Article.objects.filter(title=fields["title"]).exists():
            return False
        Article.objects.create(**fields)
    return True


class IngestionPipeline:
    def __init__(self, client: NewsApiClient | None = None, categories: Iterable[str] | None = None):
        self.categories = list(Category.values if categories is None else categories)
        missing = unmapped_categories(self.categories)
        if missing:
            raise UnmappedCategoryError(f"No provider category mapped for: {', '.join(missing)}")
        self.client = client or NewsApiClient()

    def run(self) -> IngestionResult:
        result = IngestionResult()
        for category in self.categories:
            try:
                items = self.client.top_headlines(provider_category(category))
            except UpstreamError as exc:
                logger.error("Skipping category %s: %s", category, exc)
                continue

            result.total_fetched += len(items)
            inserted = 0
            for item in items:
                fields = normalize(item, category) if isinstance(item, dict) else None
                if fields and insert_if_new(fields):
                    inserted += 1
            result.total_inserted += inserted
            logger.info(
                "Ingested %s: fetched=%d inserted=%d", category, len(items), inserted
            )

        logger.info(
            "Ingestion complete: fetched=%d inserted=%d",
            result.total_fetched,
            result.total_inserted,
        )
        return result


def ingest_news(client: NewsApiClient | None = None) -> IngestionResult:
    """Run the ingestion over every category."""
    return IngestionPipeline(client=client).run()


__all__ = [
    "IngestionPipeline",
    "IngestionResult",
    "NewsApiClient",
    "PROVIDER_CATEGORY_MAP",
    "UnmappedCategoryError",
    "UpstreamError",
    "ingest_news",
    "normalize",
    "provider_category",
]
