"""Serializers for article payloads (camelCase on the wire)."""

from rest_framework import serializers

from .media import validate_upload
from .models import Article


class ArticleSerializer(serializers.ModelSerializer):
    imageUrl = serializers.CharField(source="image_url", read_only=True)
    likes = serializers.SerializerMethodField()
    likeCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        """Expose article fields; engagement counters and timestamps are read-only."""
        model = Article
        fields = [
            "id",
            "title",
            "content",
            "description",
            "category",
            "imageUrl",
            "views",
            "likes",
            "likeCount",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    # noinspection PyMethodMayBeStatic
    def get_likes(self, obj) -> list[str]:
        return [str(user.pk) for user in obj.likes.all()]

    # noinspection PyMethodMayBeStatic
    def get_likeCount(self, obj) -> int:
        return len(obj.likes.all())


class ArticleWriteSerializer(serializers.Serializer):
    """Input for create and update; ``partial=True`` is used for updates.

    Blank values are accepted here and rejected by the store, so create and
    update report missing fields the same way for JSON and multipart bodies.
    """

    title = serializers.CharField(required=False, allow_blank=True, max_length=500)
    content = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
    imageUrl = serializers.URLField(required=False, allow_blank=True, max_length=1000, source="image_url")
    image = serializers.FileField(required=False, allow_null=True, write_only=True)

    # noinspection PyMethodMayBeStatic
    def validate_image(self, value):
        if value is not None:
            validate_upload(value)
        return value


class LikeSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    liked = serializers.BooleanField()
    likes = serializers.ListField(child=serializers.CharField())
    likeCount = serializers.IntegerField()

    @classmethod
    def for_article(cls, article: Article, liked: bool) -> dict:
        likes = [str(user.pk) for user in article.likes.all()]
        return cls({"id": article.pk, "liked": liked, "likes": likes, "likeCount": len(likes)}).data


class IngestionResultSerializer(serializers.Serializer):
    totalFetched = serializers.IntegerField()
    totalInserted = serializers.IntegerField()


class ArticleListSerializer(serializers.Serializer):
    """Documentation shape for the paginated list response."""

    news = ArticleSerializer(many=True)
    pagination = serializers.DictField(child=serializers.IntegerField())


__all__ = [
    "ArticleListSerializer",
    "ArticleSerializer",
    "ArticleWriteSerializer",
    "IngestionResultSerializer",
    "LikeSerializer",
]
