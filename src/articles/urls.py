"""URL patterns for news endpoints."""

from django.urls import path

from .views import (
    CategoriesView,
    FeaturedNewsView,
    IngestView,
    LikeView,
    NewsDetailView,
    NewsListView,
    UnlikeView,
)

urlpatterns = [
    path("", NewsListView.as_view(), name="news-list"),
    path("featured/", FeaturedNewsView.as_view(), name="news-featured"),
    path("categories/", CategoriesView.as_view(), name="news-categories"),
    path("ingest/", IngestView.as_view(), name="news-ingest"),
    path("<int:pk>/", NewsDetailView.as_view(), name="news-detail"),
    path("<int:pk>/like/", LikeView.as_view(), name="news-like"),
    path("<int:pk>/unlike/", UnlikeView.as_view(), name="news-unlike"),
]
