# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite
- locmem email backend (mail.outbox)
- Celery tasks run eagerly, provider credentials blank
- Fast password hashing
"""

from __future__ import annotations

from .base import *  # noqa: F403

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
EMAIL_HOST_USER = "shop@tailortrack.test"
DEFAULT_FROM_EMAIL = "TailorTrack <shop@tailortrack.test>"

FRONTEND_BASE_URL = "http://testserver-frontend"

TAILORTRACK = {
    "SHOP_CODE": "TT",
    "BARCODE_STRATEGY": "random",
    "DEFAULT_COUNTRY_CODE": "+91",
    "CURRENCY": "INR",
    "OUTBOUND_HTTP_TIMEOUT": 5,
}

PAYMENTS = {
    "RAZORPAY": {
        "KEY_ID": "rzp_test_key",
        "KEY_SECRET": "test_key_secret",
        "WEBHOOK_SECRET": "test_webhook_secret",
    }
}

NOTIFICATIONS = {
    "TWILIO": {"ACCOUNT_SID": "", "AUTH_TOKEN": "", "FROM_NUMBER": ""},
}

CELERY_BROKER_URL = "memory://"
CELERY_TASK_ALWAYS_EAGER = True

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_CLASSES": (),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"], "level": "CRITICAL"},
}
