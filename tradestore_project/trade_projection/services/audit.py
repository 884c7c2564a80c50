import logging
from datetime import date, datetime, time
from typing import Optional, Tuple

from django.utils import timezone

from ..dto import TradeDTO
from ..mappers import exception_to_dict
from ..models import TradeException
from .storage import storage_guard

logger = logging.getLogger(__name__)


def append(dto: TradeDTO, reason: str, recorded_at: Optional[datetime] = None) -> Tuple[TradeException, bool]:
    """Record a rejected candidate.

    Keyed by ``(trade_id, version, request_id)``: redelivery of the same candidate
    returns the existing record instead of adding a second one.
    """
    record, created = TradeException.objects.get_or_create(
        trade_id=dto.trade_id,
        version=dto.version,
        request_id=dto.request_id,
        defaults={
            "counter_party_id": dto.counter_party_id,
            "book_id": dto.book_id,
            "maturity_date": dto.maturity_date,
            "created_date": dto.created_date,
            "expired_flag": dto.expired_flag,
            "reason": reason,
            "recorded_at": recorded_at or timezone.now(),
        },
    )
    if created:
        logger.info("trade rejected trade_id=%s version=%s request_id=%s reason=%r",
                    dto.trade_id, dto.version, dto.request_id, reason)
    else:
        logger.info("rejection already recorded trade_id=%s version=%s request_id=%s",
                    dto.trade_id, dto.version, dto.request_id)
    return record, created


def get_exceptions_for_trade(trade_id: str) -> list[dict]:
    with storage_guard("exception_query", trade_id=trade_id):
        records = TradeException.objects.filter(trade_id=trade_id).order_by("-recorded_at", "-id")
        return [exception_to_dict(r) for r in records]


def get_exceptions_for_request(request_id: str, *, contains: bool = False) -> list[dict]:
    if contains:
        records = TradeException.objects.filter(request_id__icontains=request_id)
    else:
        records = TradeException.objects.filter(request_id=request_id)
    with storage_guard("exception_query", request_id=request_id):
        return [exception_to_dict(r) for r in records.order_by("-recorded_at", "-id")]


def get_exceptions_in_range(start: date, end: date) -> list[dict]:
    tz = timezone.get_current_timezone()
    lower = timezone.make_aware(datetime.combine(start, time.min), tz)
    upper = timezone.make_aware(datetime.combine(end, time.max), tz)
    records = TradeException.objects.filter(recorded_at__gte=lower, recorded_at__lte=upper)
    with storage_guard("exception_query", start=start, end=end):
        return [exception_to_dict(r) for r in records.order_by("-recorded_at", "-id")]
