# backend/config/settings/test.py
from .base import *  # noqa

DEBUG = False
SECRET_KEY = "test-secret-key"

# SQLite by default (select_for_update is a no-op there); set TEST_DB=postgres
# to run the row-locking tests against a real server.
if os.getenv("TEST_DB", "sqlite") != "postgres":  # noqa: F405
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["loggers"]["lab_core"]["level"] = "WARNING"  # noqa: F405
