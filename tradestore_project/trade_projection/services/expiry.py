import logging
import threading
from datetime import date
from typing import Callable, Optional

from django.db import close_old_connections, transaction
from django.utils import timezone

from ..conf import business_today, get_setting
from ..enums import ExpiredFlag
from ..instrumentation import EXPIRY_TRANSITIONS
from ..models import TradeProjection
from .storage import TransientStorageFailure, storage_guard

logger = logging.getLogger(__name__)


def _matured_active(today: date):
    return TradeProjection.objects.filter(expired_flag=ExpiredFlag.ACTIVE, maturity_date__lt=today)


def sweep(today: Optional[date] = None, batch_size: Optional[int] = None) -> int:
    """Move every ACTIVE row whose maturity date is before ``today`` to EXPIRED.

    Returns how many rows this call transitioned. The UPDATE re-applies the
    ACTIVE/maturity predicate, so rows already expired by a concurrent sweep are
    not counted twice and rows inserted after the scan are left for the next run.
    """
    current = business_today()
    today = today or current
    if today > current:
        raise ValueError(f"cannot sweep against a future date: {today.isoformat()} > {current.isoformat()}")
    batch_size = batch_size or get_setting("EXPIRY_SWEEP_BATCH_SIZE")

    with storage_guard("expiry_scan", today=today):
        candidate_ids = list(_matured_active(today).order_by("pk").values_list("pk", flat=True))

    transitioned = 0
    for start in range(0, len(candidate_ids), batch_size):
        batch = candidate_ids[start:start + batch_size]
        with storage_guard("expiry_update", today=today):
            with transaction.atomic():
                transitioned += _matured_active(today).filter(pk__in=batch).update(
                    expired_flag=ExpiredFlag.EXPIRED,
                    updated_at=timezone.now(),
                )

    if transitioned:
        EXPIRY_TRANSITIONS.inc(transitioned)
    logger.info("expiry sweep completed today=%s scanned=%s transitioned=%s",
                today.isoformat(), len(candidate_ids), transitioned)
    return transitioned


class ExpirySweepScheduler:
    """Runs ``sweep`` on a fixed interval until stopped."""

    def __init__(self, interval_seconds: Optional[float] = None,
                 sweep_fn: Callable[[], int] = sweep,
                 stop_event: Optional[threading.Event] = None):
        self.interval_seconds = interval_seconds or get_setting("EXPIRY_SWEEP_INTERVAL_SECONDS")
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.sweep_fn = sweep_fn
        self.stop_event = stop_event or threading.Event()

    def tick(self) -> Optional[int]:
        close_old_connections()
        try:
            return self.sweep_fn()
        except TransientStorageFailure as exc:
            # Rows left ACTIVE are picked up by the next tick.
            logger.warning("expiry sweep deferred to next tick error=%s", exc)
            return None

    def run(self, max_ticks: Optional[int] = None) -> int:
        ticks = 0
        logger.info("expiry scheduler started interval_seconds=%s", self.interval_seconds)
        while not self.stop_event.is_set():
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            self.stop_event.wait(self.interval_seconds)
        logger.info("expiry scheduler stopped ticks=%s", ticks)
        return ticks

    def stop(self):
        self.stop_event.set()
