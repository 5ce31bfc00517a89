# backend/config/settings/local.py
from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"  # noqa: F405

# Development
CORS_ALLOW_ALL_ORIGINS = True  # Only for development!

if os.getenv("DB_ENGINE", "") == "sqlite":  # noqa: F405
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",  # noqa: F405
        }
    }
