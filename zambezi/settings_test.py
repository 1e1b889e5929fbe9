"""
Test settings: same stack as production settings, minus file logging and HTTPS redirects.
"""

import os

os.environ.setdefault("DJANGO_SECRET_KEY", "zambezi-test-secret-key")

from .settings import *  # noqa: E402,F401,F403

DEBUG = False
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "zambezi-tests",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Gateways always run in mock mode under test.
STRIPE_SECRET_KEY = ""
STRIPE_WEBHOOK_SECRET = ""
PAYPAL_CLIENT_ID = ""
PAYPAL_SECRET = ""
AFTERPAY_MERCHANT_ID = ""
AFTERPAY_SECRET = ""

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler", "level": "WARNING"},
    },
    "loggers": {
        "checkout": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
