"""Django settings for the News Hub backend.

Environment-driven configuration for the database, credentials, the news
provider, and security defaults.
"""
import os
from pathlib import Path
from urllib.parse import urlparse

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def _get_env(name: str, default: str | None = None) -> str | None:
    """Read an environment variable with an optional fallback."""
    return os.environ.get(name, default)


def _get_int_env(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad input."""
    try:
        return int(_get_env(name, str(default)))
    except (TypeError, ValueError):
        return default


def _parse_database_url(url: str) -> dict:
    """Parse a PostgreSQL- or SQLite-style DATABASE_URL into a DATABASES entry."""
    parsed = urlparse(url)
    if parsed.scheme == "sqlite":
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": parsed.path.lstrip("/") or BASE_DIR / "db.sqlite3",
        }
    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": parsed.path.lstrip("/"),
        "USER": parsed.username,
        "PASSWORD": parsed.password,
        "HOST": parsed.hostname,
        "PORT": parsed.port or "5432",
    }


SECRET_KEY = _get_env("SECRET_KEY", "dev-secret-key-change-me-before-deploying")
DEBUG = _get_env("DEBUG", "True") == "True"
if not DEBUG and SECRET_KEY in ("change-me", "dev-secret-key-change-me-before-deploying"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production")
ALLOWED_HOSTS = [
    h.strip()
    for h in _get_env("ALLOWED_HOSTS", "localhost,127.0.0.1,0.0.0.0,testserver").split(",")
    if h.strip()
]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "authentication",
    "access_control",
    "articles",
    "scripts",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Resolves request.user from the bearer token or auth cookie.
    "core.middleware.CredentialMiddleware",
]

ROOT_URLCONF = "core.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
            ],
        },
    },
]

WSGI_APPLICATION = "core.wsgi.application"
ASGI_APPLICATION = "core.asgi.application"

DATABASE_URL = _get_env("DATABASE_URL")
if DATABASE_URL:
    DATABASES = {"default": _parse_database_url(DATABASE_URL)}
elif _get_env("POSTGRES_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _get_env("POSTGRES_DB", "newshub"),
            "USER": _get_env("POSTGRES_USER", "newshub"),
            "PASSWORD": _get_env("POSTGRES_PASSWORD", "newshub"),
            "HOST": _get_env("POSTGRES_HOST"),
            "PORT": _get_env("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = _get_env("MEDIA_URL", "/media/")
MEDIA_ROOT = Path(_get_env("MEDIA_ROOT", str(BASE_DIR / "media")))

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "authentication.User"

# Credentials
DEBUG_AUTH_ERRORS = _get_env("DEBUG_AUTH_ERRORS", "False") == "True"
TOKEN_TTL_HOURS = _get_int_env("TOKEN_TTL_HOURS", 24)
AUTH_COOKIE_NAME = _get_env("AUTH_COOKIE_NAME", "token")
AUTH_COOKIE_SECURE = _get_env("AUTH_COOKIE_SECURE", str(not DEBUG)) == "True"
AUTH_COOKIE_SAMESITE = _get_env("AUTH_COOKIE_SAMESITE", "Lax")

# Seed admin provisioned by ``manage.py seed_admin``
SEED_ADMIN_USERNAME = _get_env("SEED_ADMIN_USERNAME", "admin")
SEED_ADMIN_EMAIL = _get_env("SEED_ADMIN_EMAIL", "admin@newshub.com")
SEED_ADMIN_PASSWORD = _get_env("SEED_ADMIN_PASSWORD")

# bcrypt work factor for new password hashes
BCRYPT_ROUNDS = _get_int_env("BCRYPT_ROUNDS", 12)

# Article listing
NEWS_DEFAULT_PAGE_SIZE = _get_int_env("NEWS_DEFAULT_PAGE_SIZE", 20)
NEWS_MAX_PAGE_SIZE = _get_int_env("NEWS_MAX_PAGE_SIZE", 100)
NEWS_FEATURED_COUNT = _get_int_env("NEWS_FEATURED_COUNT", 5)
DEFAULT_ARTICLE_IMAGE = _get_env(
    "DEFAULT_ARTICLE_IMAGE", "https://placehold.co/800x450?text=News"
)
ARTICLE_IMAGE_MAX_BYTES = 10 * 1024 * 1024
ARTICLE_IMAGE_CONTENT_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")

# News provider used by the ingestion pipeline
NEWS_API_KEY = _get_env("NEWS_API_KEY")
NEWS_API_URL = _get_env("NEWS_API_URL", "https://newsapi.org/v2/top-headlines")
NEWS_API_COUNTRY = _get_env("NEWS_API_COUNTRY", "us")
NEWS_API_PAGE_SIZE = _get_int_env("NEWS_API_PAGE_SIZE", 50)
NEWS_API_TIMEOUT = _get_int_env("NEWS_API_TIMEOUT", 10)

LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "standard"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ["core.authentication.MiddlewareUserAuthentication"],
    "DEFAULT_PERMISSION_CLASSES": [],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "News Hub API",
    "DESCRIPTION": (
        "OpenAPI schema for the News Hub backend: article browsing and search, "
        "admin publishing and ingestion, likes, and JWT bearer/cookie authentication."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SERVE_PUBLIC": True,
    "APPEND_COMPONENTS": {
        "securitySchemes": {
            "bearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
            },
            "cookieAuth": {
                "type": "apiKey",
                "in": "cookie",
                "name": AUTH_COOKIE_NAME,
            },
        }
    },
    "SECURITY": [{"bearerAuth": []}, {"cookieAuth": []}],
}
