"""Test settings."""

import os
import tempfile

from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret-key-not-for-production"
DEBUG = False

# File-backed so that threaded tests see one shared database. IMMEDIATE
# transactions make concurrent writers queue on the lock instead of failing.
_TEST_DB = os.path.join(tempfile.gettempdir(), "shopku_test.sqlite3")

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": _TEST_DB,
        "OPTIONS": {
            "transaction_mode": "IMMEDIATE",
            "timeout": 20,
        },
        "TEST": {
            "NAME": _TEST_DB,
        },
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["loggers"]["shopku"]["level"] = "WARNING"  # noqa: F405
