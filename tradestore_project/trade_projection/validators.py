import logging
from datetime import date
from typing import Optional

from .dto import RuleResult, TradeDTO
from .enums import ExpiredFlag, RejectionRule
from .models import TradeException, TradeProjection

logger = logging.getLogger(__name__)


class MalformedCandidate(Exception): pass


def _assert_present(value, field_name: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MalformedCandidate(f"{field_name} is required.")


def _assert_version(version):
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise MalformedCandidate(f"version must be an integer >= 1, got {version!r}.")


def _assert_max_length(value, model, field_name: str):
    limit = model._meta.get_field(field_name).max_length
    if isinstance(value, str) and len(value) > limit:
        raise MalformedCandidate(f"{field_name} must be at most {limit} characters, got {len(value)}.")


def _assert_expired_flag(flag):
    if flag not in ExpiredFlag.values:
        raise MalformedCandidate(f"expired_flag must be one of {ExpiredFlag.values}, got {flag!r}.")


def assert_well_formed(dto: TradeDTO):
    if dto is None:
        raise MalformedCandidate("Trade candidate is required.")
    _assert_present(dto.trade_id, "trade_id")
    _assert_version(dto.version)
    _assert_present(dto.counter_party_id, "counter_party_id")
    _assert_present(dto.book_id, "book_id")
    _assert_present(dto.created_date, "created_date")
    _assert_present(dto.request_id, "request_id")
    _assert_expired_flag(dto.expired_flag)
    for field_name in ("trade_id", "counter_party_id", "book_id"):
        _assert_max_length(getattr(dto, field_name), TradeProjection, field_name)
    _assert_max_length(dto.request_id, TradeException, "request_id")


def is_matured(maturity_date: Optional[date], today: date) -> bool:
    return maturity_date is not None and maturity_date < today


def validate_rules(dto: TradeDTO, today: date) -> RuleResult:
    if dto.maturity_date is None:
        return RuleResult.invalid(RejectionRule.MISSING_MATURITY, "missing maturity date")

    # An already-expired candidate is a terminal-state fact, not a new maturity claim.
    if dto.expired_flag == ExpiredFlag.EXPIRED:
        logger.debug("maturity check bypassed trade_id=%s version=%s", dto.trade_id, dto.version)
        return RuleResult.ok()

    if is_matured(dto.maturity_date, today):
        return RuleResult.invalid(
            RejectionRule.MATURITY_IN_PAST,
            f"maturity date in past: {dto.maturity_date.isoformat()} < {today.isoformat()}",
        )
    return RuleResult.ok()
