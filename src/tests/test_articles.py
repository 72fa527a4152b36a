"""Endpoint tests for news browsing, publishing, and likes."""

from __future__ import annotations

import re
import time
from concurrent.futures import ThreadPoolExecutor
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError, OperationalError, connection, transaction
from django.test import SimpleTestCase, TestCase, TransactionTestCase, override_settings
from drf_spectacular.generators import SchemaGenerator
from rest_framework.test import APIClient

from articles.models import Article
from articles.services import ArticleStore
from tests.utils import auth_client, create_article, create_user

IN_MEMORY_STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}


class NewsEndpointTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("editor", "AdminPass123", role="admin")
        cls.reader = create_user("reader", "ReaderPass123")

    def setUp(self):
        self.anonymous = APIClient()
        self.admin_client = auth_client(self.admin)
        self.reader_client = auth_client(self.reader)

    def test_publish_browse_like_scenario(self):
        """Admin publishes, anyone browses, a reader likes and unlikes."""
        created = self.admin_client.post(
            "/news/",
            {
                "title": "Chips get faster",
                "content": "Long form body.",
                "description": "Short summary.",
                "category": "Technology",
            },
            format="json",
        )
        self.assertEqual(created.status_code, 201)
        article = created.json()["data"]
        self.assertEqual(article["views"], 0)
        self.assertEqual(article["likeCount"], 0)
        self.assertTrue(article["imageUrl"])

        listing = self.anonymous.get("/news/", {"category": "Technology"}).json()["data"]
        self.assertEqual([item["id"] for item in listing["news"]], [article["id"]])
        self.assertEqual(listing["pagination"], {"page": 1, "limit": 20, "total": 1, "pages": 1})

        detail = self.anonymous.get(f"/news/{article['id']}/").json()["data"]
        self.assertEqual(detail["views"], 1)

        liked = self.reader_client.patch(f"/news/{article['id']}/like/").json()["data"]
        self.assertTrue(liked["liked"])
        self.assertEqual(liked["likes"], [str(self.reader.id)])
        self.assertEqual(liked["likeCount"], 1)

        unliked = self.reader_client.patch(f"/news/{article['id']}/unlike/").json()["data"]
        self.assertFalse(unliked["liked"])
        self.assertEqual(unliked["likeCount"], 0)

        self.assertEqual(self.anonymous.get("/news/categories/").json()["data"], ["Technology"])

    def test_each_read_counts_one_view(self):
        article = create_article()

        for expected in (1, 2, 3):
            response = self.anonymous.get(f"/news/{article.pk}/")
            self.assertEqual(response.json()["data"]["views"], expected)

        article.refresh_from_db()
        self.assertEqual(article.views, 3)

    def test_read_missing_article_404(self):
        response = self.anonymous.get("/news/999999/")
        body = response.json()

        self.assertEqual(response.status_code, 404)
        self.assertEqual(body["kind"], "NotFound")
        self.assertEqual(body["errors"], ["News article not found."])

    def test_like_twice_restores_state(self):
        article = create_article()

        first = self.reader_client.patch(f"/news/{article.pk}/like/").json()["data"]
        second = self.reader_client.patch(f"/news/{article.pk}/like/").json()["data"]

        self.assertTrue(first["liked"])
        self.assertFalse(second["liked"])
        self.assertEqual(second["likeCount"], 0)

    def test_likes_from_different_users_accumulate(self):
        article = create_article()

        self.reader_client.patch(f"/news/{article.pk}/like/")
        response = self.admin_client.patch(f"/news/{article.pk}/like/")

        self.assertEqual(response.json()["data"]["likeCount"], 2)
        self.assertCountEqual(
            response.json()["data"]["likes"], [str(self.reader.id), str(self.admin.id)]
        )

    def test_unlike_without_like_is_noop(self):
        article = create_article()

        response = self.reader_client.patch(f"/news/{article.pk}/unlike/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["likeCount"], 0)

    def test_like_requires_authentication(self):
        article = create_article()

        response = self.anonymous.patch(f"/news/{article.pk}/like/")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(article.likes.count(), 0)

    def test_like_missing_article_404(self):
        self.assertEqual(self.reader_client.patch("/news/424242/like/").status_code, 404)

    def test_reader_cannot_publish(self):
        response = self.reader_client.post(
            "/news/",
            {"title": "Nope", "content": "c", "description": "d", "category": "Sports"},
            format="json",
        )

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["kind"], "AuthorizationError")
        self.assertFalse(Article.objects.exists())

    def test_anonymous_cannot_publish(self):
        response = self.anonymous.post(
            "/news/",
            {"title": "Nope", "content": "c", "description": "d", "category": "Sports"},
            format="json",
        )

        self.assertEqual(response.status_code, 401)
        self.assertFalse(Article.objects.exists())

    def test_reader_cannot_edit_or_delete(self):
        article = create_article(title="Original")

        edit = self.reader_client.put(f"/news/{article.pk}/", {"title": "Hacked"}, format="json")
        delete = self.reader_client.delete(f"/news/{article.pk}/")

        self.assertEqual(edit.status_code, 403)
        self.assertEqual(delete.status_code, 403)
        article.refresh_from_db()
        self.assertEqual(article.title, "Original")

    def test_invalid_category_rejected(self):
        response = self.admin_client.post(
            "/news/",
            {"title": "T", "content": "c", "description": "d", "category": "Weather"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["kind"], "ValidationError")
        self.assertFalse(Article.objects.exists())

    def test_missing_fields_rejected(self):
        response = self.admin_client.post("/news/", {"title": "Only a title"}, format="json")

        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"][0]
        self.assertCountEqual(errors.keys(), ["content", "description", "category"])

    def test_explicit_image_url_is_kept(self):
        response = self.admin_client.post(
            "/news/",
            {
                "title": "With image",
                "content": "c",
                "description": "d",
                "category": "Health",
                "imageUrl": "https://img.example.com/cover.jpg",
            },
            format="json",
        )

        self.assertEqual(response.json()["data"]["imageUrl"], "https://img.example.com/cover.jpg")

    @override_settings(DEFAULT_ARTICLE_IMAGE="https://placeholder.example.com/news.png")
    def test_missing_image_uses_placeholder(self):
        response = self.admin_client.post(
            "/news/",
            {"title": "No image", "content": "c", "description": "d", "category": "Business"},
            format="json",
        )

        self.assertEqual(response.json()["data"]["imageUrl"], "https://placeholder.example.com/news.png")

    def test_partial_update_merges_fields(self):
        article = create_article(title="Before", category="Sports", views=7)
        article.likes.add(self.reader)

        response = self.admin_client.put(f"/news/{article.pk}/", {"title": "After"}, format="json")
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["title"], "After")
        self.assertEqual(data["category"], "Sports")
        self.assertEqual(data["description"], "Before summary")
        self.assertEqual(data["views"], 7)
        self.assertEqual(data["likeCount"], 1)

    def test_patch_is_accepted_for_updates(self):
        article = create_article()

        response = self.admin_client.patch(f"/news/{article.pk}/", {"category": "Politics"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["category"], "Politics")

    def test_update_with_invalid_category_leaves_article(self):
        article = create_article(title="Stable", category="Health")

        response = self.admin_client.put(
            f"/news/{article.pk}/", {"title": "Changed", "category": "Weather"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        article.refresh_from_db()
        self.assertEqual(article.title, "Stable")
        self.assertEqual(article.category, "Health")

    def test_update_rejects_blank_title(self):
        article = create_article(title="Keep")

        response = self.admin_client.put(f"/news/{article.pk}/", {"title": "  "}, format="json")

        self.assertEqual(response.status_code, 400)

    def test_update_missing_article_404(self):
        response = self.admin_client.put("/news/31337/", {"title": "Ghost"}, format="json")

        self.assertEqual(response.status_code, 404)

    def test_delete_then_404(self):
        article = create_article()

        deleted = self.admin_client.delete(f"/news/{article.pk}/")
        again = self.admin_client.delete(f"/news/{article.pk}/")
        read = self.anonymous.get(f"/news/{article.pk}/")

        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(deleted.json()["data"], {"message": "News article deleted successfully"})
        self.assertEqual(again.status_code, 404)
        self.assertEqual(read.status_code, 404)

    def test_featured_returns_newest_first(self):
        articles = [create_article(title=f"Story {index}") for index in range(7)]

        with self.settings(NEWS_FEATURED_COUNT=5):
            data = self.anonymous.get("/news/featured/").json()["data"]

        self.assertEqual([item["id"] for item in data], [a.pk for a in reversed(articles)][:5])

    def test_categories_lists_only_present_categories_in_enum_order(self):
        create_article(category="Business")
        create_article(category="Technology")
        create_article(category="Business")

        data = self.anonymous.get("/news/categories/").json()["data"]

        self.assertEqual(data, ["Technology", "Business"])

    def test_categories_empty_store(self):
        self.assertEqual(self.anonymous.get("/news/categories/").json()["data"], [])

    @override_settings(STORAGES=IN_MEMORY_STORAGES)
    def test_multipart_upload_stores_image(self):
        upload = SimpleUploadedFile("cover.PNG", b"\x89PNG\r\n\x1a\nfake", content_type="image/png")
        response = self.admin_client.post(
            "/news/",
            {"title": "Uploaded", "content": "c", "description": "d", "category": "Sports", "image": upload},
            format="multipart",
        )

        self.assertEqual(response.status_code, 201)
        image_url = response.json()["data"]["imageUrl"]
        self.assertTrue(image_url.startswith("http://testserver/media/news/"))
        self.assertTrue(image_url.endswith(".png"))

    def test_upload_with_wrong_type_rejected(self):
        upload = SimpleUploadedFile("notes.txt", b"plain text", content_type="text/plain")
        response = self.admin_client.post(
            "/news/",
            {"title": "Bad", "content": "c", "description": "d", "category": "Sports", "image": upload},
            format="multipart",
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Article.objects.exists())


class ArticleStoreTests(TestCase):
    """Store operations exercised below the HTTP layer."""

    @classmethod
    def setUpTestData(cls):
        cls.reader = create_user("store-reader", "ReaderPass123")

    def test_read_increment_is_not_lost_with_stale_instance(self):
        article = create_article()
        stale = Article.objects.get(pk=article.pk)

        ArticleStore.read(article.pk)
        ArticleStore.read(article.pk)
        ArticleStore.update(stale.pk, {"title": "Edited"})

        article.refresh_from_db()
        self.assertEqual(article.views, 2)
        self.assertEqual(article.title, "Edited")

    def test_toggle_like_ignores_existing_row(self):
        article = create_article()
        article.likes.add(self.reader)

        _, liked = ArticleStore.toggle_like(article.pk, self.reader)

        self.assertFalse(liked)
        self.assertEqual(article.likes.count(), 0)

    def test_update_does_not_touch_engagement(self):
        article = create_article(views=3)
        article.likes.add(self.reader)

        ArticleStore.update(article.pk, {"description": "fresh"})

        article.refresh_from_db()
        self.assertEqual(article.views, 3)
        self.assertEqual(article.likes.count(), 1)
        self.assertEqual(article.description, "fresh")



class ConcurrentEngagementTests(TransactionTestCase):
    """Views and likes hit from a thread pool, one database connection per worker."""

    WORKERS = 10

    def setUp(self):
        self.article = create_article()
        self.first = create_user("first-reader", "ReaderPass123")
        self.second = create_user("second-reader", "ReaderPass123")

    @staticmethod
    def _in_worker(operation, *args):
        # SQLite reports contention between shared-cache connections as "table is locked".
        try:
            for _ in range(200):
                try:
                    with transaction.atomic():
                        return operation(*args)
                except OperationalError:
                    time.sleep(0.01)
            raise AssertionError("database stayed locked")
        finally:
            connection.close()

    def _run_all(self, calls):
        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            futures = [pool.submit(self._in_worker, operation, *args) for operation, *args in calls]
            return [future.result() for future in futures]

    def test_parallel_reads_count_every_view(self):
        self._run_all([(ArticleStore.read, self.article.pk)] * self.WORKERS)

        self.article.refresh_from_db()
        self.assertEqual(self.article.views, self.WORKERS)

    def test_parallel_toggles_flip_once_each(self):
        calls = [(ArticleStore.toggle_like, self.article.pk, self.first)] * 3
        calls += [(ArticleStore.toggle_like, self.article.pk, self.second)] * 4

        self._run_all(calls)

        self.assertEqual(list(self.article.likes.all()), [self.first])


class UnexpectedErrorTests(TestCase):
    def test_database_failure_is_generic_500(self):
        with mock.patch.object(ArticleStore, "featured", side_effect=DatabaseError("connection reset")):
            with self.assertLogs("core.exceptions", level="ERROR"):
                response = APIClient().get("/news/featured/")
        body = response.json()

        self.assertEqual(response.status_code, 500)
        self.assertEqual(body["kind"], "UnexpectedError")
        self.assertEqual(body["errors"], ["An unexpected error occurred."])
        self.assertNotIn("connection reset", response.content.decode())


class NewsSchemaTests(SimpleTestCase):
    def test_patch_documents_the_same_body_as_put(self):
        schema = SchemaGenerator().get_schema(request=None, public=True)
        detail = next(item for path, item in schema["paths"].items() if re.fullmatch(r"/news/\{\w+\}/", path))

        self.assertIn("requestBody", detail["patch"])
        self.assertEqual(detail["patch"]["requestBody"], detail["put"]["requestBody"])
        self.assertEqual(detail["patch"]["responses"]["200"], detail["put"]["responses"]["200"])
