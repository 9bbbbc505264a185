"""
Django settings for the photo contest service.

Uses django-configurations for class-based settings.
See https://docs.djangoproject.com/en/6.0/ref/settings/
"""

from pathlib import Path

from configurations import Configuration, values


class Base(Configuration):
    """Base configuration for all environments."""

    BASE_DIR = Path(__file__).resolve().parent.parent

    SECRET_KEY = values.SecretValue()

    DEBUG = values.BooleanValue(False)

    ALLOWED_HOSTS = values.ListValue([])

    # Application definition
    INSTALLED_APPS = [
        "django.contrib.admin",
        "django.contrib.auth",
        "django.contrib.contenttypes",
        "django.contrib.sessions",
        "django.contrib.messages",
        "django.contrib.staticfiles",
        # Project apps
        "common",
        "uploads",
        "submissions",
        "api",
    ]

    MIDDLEWARE = [
        "django.middleware.security.SecurityMiddleware",
        "whitenoise.middleware.WhiteNoiseMiddleware",
        "django.contrib.sessions.middleware.SessionMiddleware",
        "django.middleware.common.CommonMiddleware",
        "django.middleware.csrf.CsrfViewMiddleware",
        "django.contrib.auth.middleware.AuthenticationMiddleware",
        "django.contrib.messages.middleware.MessageMiddleware",
        "django.middleware.clickjacking.XFrameOptionsMiddleware",
    ]

    ROOT_URLCONF = "boot.urls"

    # API routes have no trailing slash
    APPEND_SLASH = False

    TEMPLATES = [
        {
            "BACKEND": "django.template.backends.django.DjangoTemplates",
            "DIRS": [],
            "APP_DIRS": True,
            "OPTIONS": {
                "context_processors": [
                    "django.template.context_processors.request",
                    "django.contrib.auth.context_processors.auth",
                    "django.contrib.messages.context_processors.messages",
                ],
            },
        },
    ]

    WSGI_APPLICATION = "boot.wsgi.application"

    # Database
    DATABASES = values.DatabaseURLValue("sqlite:///db.sqlite3")

    # Password validation
    AUTH_PASSWORD_VALIDATORS = [
        {
            "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
        },
        {
            "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        },
        {
            "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
        },
        {
            "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
        },
    ]

    # Internationalization
    LANGUAGE_CODE = values.Value("en-us")
    TIME_ZONE = values.Value("UTC")
    USE_I18N = True
    USE_TZ = True

    # Static files (Django admin assets)
    STATIC_URL = values.Value("static/")
    STATIC_ROOT = Path(BASE_DIR / "staticfiles")

    # Object store (Cloudflare R2 or any S3-compatible endpoint)
    R2_ACCOUNT_ID = values.Value("", environ_prefix=None)
    R2_ACCESS_KEY_ID = values.Value("", environ_prefix=None)
    R2_SECRET_ACCESS_KEY = values.Value("", environ_prefix=None)
    R2_BUCKET_NAME = values.Value("", environ_prefix=None)
    R2_ENDPOINT_URL = values.Value("", environ_prefix=None)

    # Upload sessions (milliseconds)
    UPLOAD_SESSION_DEFAULT_TTL_MS = values.IntegerValue(
        86_400_000, environ_prefix=None
    )  # 24 hours
    UPLOAD_SESSION_MIN_TTL_MS = 300_000  # 5 minutes
    UPLOAD_SESSION_MAX_TTL_MS = 604_800_000  # 7 days

    # Upload grants
    UPLOAD_GRANT_EXPIRES_IN = values.IntegerValue(
        600, environ_prefix=None
    )  # seconds
    PHOTO_UPLOAD_MAX_SIZE = 10_485_760  # 10 MB
    PHOTO_UPLOAD_ALLOWED_TYPES = (
        None  # None = accept all; set to list e.g. ["image/jpeg", "image/png"]
    )

    # Admin listing API (unset = every call is refused)
    ADMIN_API_KEY = values.Value("", environ_prefix=None)

    LOGGING = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "{asctime} {levelname} {name} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "loggers": {
            "common": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "uploads": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "submissions": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "api": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "photocontest": {"handlers": ["console"], "level": "INFO", "propagate": False},
        },
    }

    # Default field
    DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


class Dev(Base):
    """Development configuration."""

    DEBUG = True

    SECRET_KEY = values.Value("django-insecure-dev-key-change-in-production")

    ALLOWED_HOSTS = values.ListValue(["localhost", "127.0.0.1", "testserver"])

    CSRF_TRUSTED_ORIGINS = values.ListValue([])

    # WhiteNoise for serving static files in development
    STORAGES = {
        "default": {
            "BACKEND": "django.core.files.storage.FileSystemStorage",
        },
        "staticfiles": {
            "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
        },
    }


class Production(Base):
    """Production configuration."""

    DEBUG = False

    ALLOWED_HOSTS = values.ListValue([])

    # Security settings
    SECURE_SSL_REDIRECT = values.BooleanValue(True)
    SECURE_HSTS_SECONDS = values.IntegerValue(31536000)
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

    # WhiteNoise for static files
    STORAGES = {
        "default": {
            "BACKEND": "django.core.files.storage.FileSystemStorage",
        },
        "staticfiles": {
            "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
        },
    }
