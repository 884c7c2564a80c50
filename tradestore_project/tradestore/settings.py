import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env(name, default=None):
    return os.environ.get(f"TRADESTORE_{name}", default)


SECRET_KEY = _env("SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = _env("DEBUG", "false").lower() in {"1", "true", "yes"}
ALLOWED_HOSTS = [h for h in _env("ALLOWED_HOSTS", "*").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "trade_projection",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "tradestore.urls"
WSGI_APPLICATION = "tradestore.wsgi.application"

STORAGE_TIMEOUT_SECONDS = float(_env("STORAGE_TIMEOUT_SECONDS", "5"))

_DB_ENGINE = _env("DB_ENGINE", "sqlite3")
if _DB_ENGINE == "postgresql":
    _timeout_ms = int(STORAGE_TIMEOUT_SECONDS * 1000)
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _env("DB_NAME", "tradestore"),
            "USER": _env("DB_USER", "tradestore"),
            "PASSWORD": _env("DB_PASSWORD", ""),
            "HOST": _env("DB_HOST", "localhost"),
            "PORT": _env("DB_PORT", "5432"),
            "OPTIONS": {
                "connect_timeout": max(1, int(STORAGE_TIMEOUT_SECONDS)),
                "options": f"-c statement_timeout={_timeout_ms} -c lock_timeout={_timeout_ms}",
            },
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": _env("DB_NAME", str(BASE_DIR / "tradestore.sqlite3")),
            "OPTIONS": {"timeout": STORAGE_TIMEOUT_SECONDS},
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = _env("TIME_ZONE", "UTC")
USE_TZ = True

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
}

TRADE_STORE = {
    "EXPIRY_SWEEP_INTERVAL_SECONDS": float(_env("EXPIRY_SWEEP_INTERVAL_SECONDS", "3")),
    "EXPIRY_SWEEP_BATCH_SIZE": int(_env("EXPIRY_SWEEP_BATCH_SIZE", "500")),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "trade_projection": {
            "handlers": ["console"],
            "level": _env("LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
