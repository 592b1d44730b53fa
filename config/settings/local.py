from .base import *  # noqa: F403
from .base import LOGGING
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = True
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="q3Zt0hWmD8yVvJ2nKc5sLrX9uAeB7fGpN4iRjT1oYwHxE6kMzUdC0bSaQlPgIhFv",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#allowed-hosts
ALLOWED_HOSTS = ["localhost", "0.0.0.0", "127.0.0.1"]  # noqa: S104

# CACHES
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#caches
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "",
    },
}

# EMAIL
# ------------------------------------------------------------------------------
# Console backend prints emails to terminal (no mail server needed)
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Billing
# ------------------------------------------------------------------------------
# Typos in feature and limit names raise while developing.
BILLING_STRICT_GATES = env.bool("BILLING_STRICT_GATES", default=True)

# Logging
# ------------------------------------------------------------------------------
# Make local development chatty so ledger increments show up immediately.
LOGGING["root"]["level"] = "DEBUG"
LOGGING["loggers"]["ghanafarmer"] = {
    "handlers": ["console"],
    "level": "DEBUG",
    "propagate": False,
}
LOGGING["loggers"]["ghanafarmer.billing"]["level"] = "DEBUG"
