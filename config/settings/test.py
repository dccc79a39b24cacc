# config/settings/test.py
from .base import *  # noqa

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Tests exercise the in-memory idempotency store unless a test overrides it.
COMMON_IDEMPOTENCY_USE_DB = False

LOGGING = build_logging_config(LOG_DIR, "WARNING", quiet=True)  # noqa: F405
