"""
NexaProc – Django Settings (Infrastructure Only)
==================================================
Django is the container for the record store adapter.
The engines never import Django; they talk to a RecordStore.

Procurement parameters (tax rate, company code) live under
NEXAPROC_PROCUREMENT and are read through core.config.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "NEXAPROC_SECRET_KEY", "nexaproc-dev-key-replace-before-deployment"
)

DEBUG = os.environ.get("NEXAPROC_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── NexaProc Modules ──────────────────────────────────
    "adapters.django_store",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured through env.
DATABASES = {
    "default": {
        "ENGINE": os.environ.get(
            "NEXAPROC_DB_ENGINE", "django.db.backends.sqlite3"
        ),
        "NAME": os.environ.get("NEXAPROC_DB_NAME", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "nexaproc": {
            "handlers": ["console"],
            "level": os.environ.get("NEXAPROC_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}

# ── Procurement ───────────────────────────────────────────────
NEXAPROC_PROCUREMENT = {
    "TAX_RATE": os.environ.get("NEXAPROC_TAX_RATE", "11"),
    "COMPANY_CODE": os.environ.get("NEXAPROC_COMPANY_CODE", "RGI"),
}
