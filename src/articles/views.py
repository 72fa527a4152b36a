"""News endpoints: public browsing, admin publishing, likes, and ingestion."""

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import permissions, serializers, status

from access_control.permissions import ADMIN_ONLY, AUTHENTICATED_ONLY
from core.response import BaseAPIView, api_response, message_response
from .ingestion import ingest_news
from .query import ArticleQuery
from .serializers import (
    ArticleListSerializer,
    ArticleSerializer,
    ArticleWriteSerializer,
    IngestionResultSerializer,
    LikeSerializer,
)
from .services import ArticleStore

logger = logging.getLogger(__name__)


class PublicReadMixin:
    """Reads are public; every other method requires an admin principal."""

    permission_classes = ADMIN_ONLY

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return []
        return super().get_permissions()  # type: ignore[misc]


def _write_payload(request, partial: bool) -> tuple[dict, object]:
    serializer = ArticleWriteSerializer(data=request.data, partial=partial)
    serializer.is_valid(raise_exception=True)
    fields = dict(serializer.validated_data)
    image = fields.pop("image", None)
    return fields, image


class NewsListView(PublicReadMixin, BaseAPIView):
    @extend_schema(
        parameters=[
            OpenApiParameter("category", str),
            OpenApiParameter("search", str),
            OpenApiParameter("page", int),
            OpenApiParameter("limit", int),
            OpenApiParameter("sortBy", str, enum=["createdAt", "updatedAt", "views", "title"]),
            OpenApiParameter("order", str, enum=["asc", "desc"]),
        ],
        responses=ArticleListSerializer,
    )
    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """List articles filtered by category/search, sorted and paginated."""
        page = ArticleStore.list_articles(ArticleQuery.from_params(request.query_params))
        return api_response(
            {
                "news": ArticleSerializer(page.items, many=True).data,
                "pagination": page.pagination,
            }
        )

    @extend_schema(request=ArticleWriteSerializer, responses={201: ArticleSerializer})
    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Publish a new article (admin only)."""
        fields, image = _write_payload(request, partial=False)
        article = ArticleStore.create(fields, image=image, request=request)
        logger.info("Article %s created by %s", article.pk, request.user.pk)
        return api_response(ArticleSerializer(article).data, status=status.HTTP_201_CREATED)


class FeaturedNewsView(BaseAPIView):
    permission_classes: list = []

    @extend_schema(responses=ArticleSerializer(many=True))
    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the newest articles for the front page."""
        return api_response(ArticleSerializer(ArticleStore.featured(), many=True).data)


class CategoriesView(BaseAPIView):
    permission_classes: list = []

    @extend_schema(responses=serializers.ListField(child=serializers.CharField()))
    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the categories that currently have at least one article."""
        return api_response(ArticleStore.categories())


class NewsDetailView(PublicReadMixin, BaseAPIView):
    @extend_schema(responses=ArticleSerializer)
    # noinspection PyMethodMayBeStatic
    def get(self, request, pk: int):
        """Return one article and count the view."""
        return api_response(ArticleSerializer(ArticleStore.read(pk)).data)

    @extend_schema(request=ArticleWriteSerializer, responses=ArticleSerializer)
    # noinspection PyMethodMayBeStatic
    def put(self, request, pk: int):
        """Merge the supplied fields into the article (admin only)."""
        fields, image = _write_payload(request, partial=True)
        article = ArticleStore.update(pk, fields, image=image, request=request)
        return api_response(ArticleSerializer(article).data)

    @extend_schema(request=ArticleWriteSerializer, responses=ArticleSerializer)
    def patch(self, request, pk: int):
        return self.put(request, pk)

    # noinspection PyMethodMayBeStatic
    def delete(self, request, pk: int):
        """Permanently remove the article (admin only)."""
        ArticleStore.delete(pk)
        logger.info("Article %s deleted by %s", pk, request.user.pk)
        return message_response("News article deleted successfully")


class LikeView(BaseAPIView):
    permission_classes = AUTHENTICATED_ONLY

    @extend_schema(request=None, responses=LikeSerializer)
    # noinspection PyMethodMayBeStatic
    def patch(self, request, pk: int):
        """Toggle the current user's like on the article."""
        article, liked = ArticleStore.toggle_like(pk, request.user)
        return api_response(LikeSerializer.for_article(article, liked))


class UnlikeView(BaseAPIView):
    permission_classes = AUTHENTICATED_ONLY

    @extend_schema(request=None, responses=LikeSerializer)
    # noinspection PyMethodMayBeStatic
    def patch(self, request, pk: int):
        """Remove the current user's like from the article."""
        article = ArticleStore.unlike(pk, request.user)
        return api_response(LikeSerializer.for_article(article, liked=False))


class IngestView(BaseAPIView):
    permission_classes = ADMIN_ONLY

    @extend_schema(request=None, responses=IngestionResultSerializer)
    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Pull provider headlines for every category into the store (admin only)."""
        logger.info("Ingestion triggered by %s", request.user.pk)
        return api_response(ingest_news().as_dict())


__all__ = [
    "CategoriesView",
    "FeaturedNewsView",
    "IngestView",
    "LikeView",
    "NewsDetailView",
    "NewsListView",
    "UnlikeView",
]
