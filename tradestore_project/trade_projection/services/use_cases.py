import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional

from django.db import transaction

from ..conf import business_today
from ..dto import Outcome, TradeDTO
from ..enums import OutcomeStatus, RejectionRule
from ..instrumentation import CANDIDATES_PROCESSED, CANDIDATES_REJECTED, PROCESS_SECONDS
from ..models import TradeLock
from ..validators import assert_well_formed, validate_rules
from . import audit, projection, versioning
from .storage import storage_guard

logger = logging.getLogger(__name__)


def _lock_trade(trade_id: str) -> TradeLock:
    # Must run inside transaction.atomic(); the row lock is held until commit.
    TradeLock.objects.get_or_create(trade_id=trade_id)
    return TradeLock.objects.select_for_update().get(trade_id=trade_id)


def _reject(dto: TradeDTO, rule: str, reason: str) -> Outcome:
    with storage_guard("exception_append", trade_id=dto.trade_id, version=dto.version):
        with transaction.atomic():
            audit.append(dto, reason)
    CANDIDATES_REJECTED.labels(rule=rule).inc()
    return Outcome(
        status=OutcomeStatus.REJECTED,
        trade_id=dto.trade_id,
        version=dto.version,
        request_id=dto.request_id,
        reason=reason,
        rule=rule,
    )


def _resolve_and_project(dto: TradeDTO) -> Optional[str]:
    """Resolve the version and write the projection as one step under the trade's lock.

    Returns the rejection reason, or None when the candidate was projected.
    """
    with storage_guard("projection_upsert", trade_id=dto.trade_id, version=dto.version):
        with transaction.atomic():
            _lock_trade(dto.trade_id)
            resolution = versioning.resolve(dto.trade_id, dto.version)
            if not resolution.accepted:
                return resolution.reason
            projection.upsert(dto)
    return None


def _process(dto: TradeDTO, today: date) -> Outcome:
    rules = validate_rules(dto, today)
    if not rules.valid:
        return _reject(dto, rules.rule, rules.reason)

    reason = _resolve_and_project(dto)
    if reason is not None:
        return _reject(dto, RejectionRule.LOWER_VERSION, reason)

    return Outcome(
        status=OutcomeStatus.ACCEPTED,
        trade_id=dto.trade_id,
        version=dto.version,
        request_id=dto.request_id,
    )


def process_trade(dto: TradeDTO, today: Optional[date] = None) -> Outcome:
    """Validate one candidate and route it to the projection or the exception log.

    Rejections come back as an ``Outcome``; ``MalformedCandidate`` and
    ``TransientStorageFailure`` are raised. Safe to call again with the same
    candidate after a failure.
    """
    assert_well_formed(dto)
    today = today or business_today()

    with PROCESS_SECONDS.time():
        outcome = _process(dto, today)

    CANDIDATES_PROCESSED.labels(outcome=outcome.status).inc()
    logger.info(
        "trade processed trade_id=%s version=%s request_id=%s outcome=%s reason=%r",
        outcome.trade_id, outcome.version, outcome.request_id, outcome.status, outcome.reason,
    )
    return outcome


def process_batch(dtos: Iterable[TradeDTO], request_id: Optional[str] = None,
                  today: Optional[date] = None) -> List[Outcome]:
    request_id = request_id or str(uuid.uuid4())
    today = today or business_today()
    outcomes = []
    for dto in dtos:
        if dto.request_id is None:
            dto = replace(dto, request_id=request_id)
        outcomes.append(process_trade(dto, today=today))
    return outcomes
