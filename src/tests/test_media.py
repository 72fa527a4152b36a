"""Tests for the article image resolver."""

from __future__ import annotations

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import RequestFactory, SimpleTestCase, override_settings
from rest_framework.exceptions import ValidationError

from articles.media import resolve_image_reference, validate_upload

IN_MEMORY_STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}


def _png(name="cover.png", size=16):
    return SimpleUploadedFile(name, b"\x89PNG" + b"0" * size, content_type="image/png")


@override_settings(STORAGES=IN_MEMORY_STORAGES, DEFAULT_ARTICLE_IMAGE="https://placeholder.example.com/x.png")
class ResolveImageReferenceTests(SimpleTestCase):
    def test_explicit_url_wins_over_upload(self):
        resolved = resolve_image_reference(" https://img.example.com/a.jpg ", upload=_png())

        self.assertEqual(resolved, "https://img.example.com/a.jpg")

    def test_upload_used_when_no_url(self):
        request = RequestFactory().post("/news/")

        resolved = resolve_image_reference(None, upload=_png(), request=request)

        self.assertTrue(resolved.startswith("http://testserver/media/news/"))
        self.assertTrue(resolved.endswith(".png"))

    def test_upload_without_request_keeps_storage_url(self):
        resolved = resolve_image_reference("", upload=_png())

        self.assertTrue(resolved.startswith("/media/news/"))

    def test_placeholder_when_nothing_supplied(self):
        self.assertEqual(resolve_image_reference(), "https://placeholder.example.com/x.png")
        self.assertEqual(resolve_image_reference("   "), "https://placeholder.example.com/x.png")


class ValidateUploadTests(SimpleTestCase):
    def test_accepts_supported_image(self):
        validate_upload(_png())

    def test_rejects_unsupported_type(self):
        upload = SimpleUploadedFile("doc.pdf", b"%PDF", content_type="application/pdf")

        with self.assertRaises(ValidationError):
            validate_upload(upload)

    @override_settings(ARTICLE_IMAGE_MAX_BYTES=8)
    def test_rejects_oversized_file(self):
        with self.assertRaises(ValidationError):
            validate_upload(_png(size=64))
