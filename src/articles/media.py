"""Resolve the image reference stored on an article.

Priority: an explicit URL from the request body, then the hosted URL of an
uploaded file, then the configured placeholder. Uploads go through Django's
``default_storage`` so the object-storage backend stays a settings concern.
"""

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from rest_framework.exceptions import ValidationError

logger = logging.getLogger(__name__)

UPLOAD_PREFIX = "news"


def validate_upload(upload) -> None:
    """Reject uploads that are not a supported image type or are too large."""

    content_type = getattr(upload, "content_type", None)
    if content_type not in settings.ARTICLE_IMAGE_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed.")
    if upload.size > settings.ARTICLE_IMAGE_MAX_BYTES:
        raise ValidationError("Image exceeds the 10MB upload limit.")


def _absolute(url: str, request=None) -> str:
    if url.startswith(("http://", "https://")):
        return url
    if request is not None:
        return request.build_absolute_uri(url)
    return url


def store_upload(upload, request=None) -> str:
    """Save ``upload`` to the configured storage and return its absolute URL."""

    _, ext = os.path.splitext(upload.name or "")
    name = default_storage.save(f"{UPLOAD_PREFIX}/{uuid.uuid4().hex}{ext.lower()}", upload)
    logger.info("Stored article image %s", name)
    return _absolute(default_storage.url(name), request)


def resolve_image_reference(image_url: str | None = None, upload=None, request=None) -> str:
    """Return the canonical image reference for a new article; never fails on absence."""

    if image_url and image_url.strip():
        return image_url.strip()
    if upload is not None:
        return store_upload(upload, request)
    return settings.DEFAULT_ARTICLE_IMAGE


__all__ = ["resolve_image_reference", "store_upload", "validate_upload"]
