# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite (tables built from models, no migration files needed)
- locmem mail outbox so notification tests can assert on sent e-mails
- Notifications dispatched inline after commit (deterministic)
- Stripe secrets set to fixed test values (gateway calls are patched in tests)
- Throttling effectively disabled
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import PAYMENTS, REST_FRAMEWORK

DEBUG = False

SECRET_KEY = "test-secret-key"

ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "layered-tests",
    }
}

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

NOTIFICATIONS_ASYNC = False

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

PAYMENTS["STRIPE"].update(
    {
        "PUBLISHABLE_KEY": "pk_test_layered",
        "SECRET_KEY": "sk_test_layered",
        "WEBHOOK_SECRET": "whsec_test_layered",
    }
)

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    scope: "10000/min" for scope in REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]
}
