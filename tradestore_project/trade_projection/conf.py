from datetime import date

from django.conf import settings
from django.utils import timezone

DEFAULTS = {
    "EXPIRY_SWEEP_INTERVAL_SECONDS": 3.0,
    "EXPIRY_SWEEP_BATCH_SIZE": 500,
}


def get_setting(name: str):
    overrides = getattr(settings, "TRADE_STORE", {}) or {}
    return overrides.get(name, DEFAULTS[name])


def business_today() -> date:
    """The calendar date every maturity comparison is made against.

    Both the ingestion rules and the expiry sweep read "today" from here so they
    agree on calendar and time zone (``settings.TIME_ZONE``).
    """
    return timezone.localdate()
