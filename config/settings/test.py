import os

# Use a fixed secret key for CI
os.environ.setdefault("DJANGO_SECRET_KEY", "django-insecure-testkey")
os.environ.setdefault("DJANGO_READ_DOT_ENV_FILE", "False")

from .base import *  # noqa: E402

# Use temporary DB for CI tests
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
        "ATOMIC_REQUESTS": False,
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Disable sending real emails
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

STORAGES["staticfiles"] = {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"}

# Disable debug
DEBUG = False
