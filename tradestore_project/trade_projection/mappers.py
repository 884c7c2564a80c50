from datetime import date
from typing import Any, Dict, Optional

from .dto import Outcome, TradeDTO
from .enums import ExpiredFlag
from .models import TradeException, TradeProjection


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def dto_from_payload(data: Dict[str, Any], request_id: Optional[str] = None) -> TradeDTO:
    return TradeDTO(
        trade_id=data["tradeId"],
        version=data["version"],
        counter_party_id=data["counterPartyId"],
        book_id=data["bookId"],
        maturity_date=data.get("maturityDate"),
        created_date=data["createdDate"],
        expired_flag=data.get("expiredFlag") or ExpiredFlag.ACTIVE,
        request_id=data.get("requestId") or request_id,
    )


def dto_from_model(m: TradeProjection) -> TradeDTO:
    return TradeDTO(
        trade_id=m.trade_id,
        version=m.version,
        counter_party_id=m.counter_party_id,
        book_id=m.book_id,
        maturity_date=m.maturity_date,
        created_date=m.created_date,
        expired_flag=m.expired_flag,
    )


def projection_attributes(dto: TradeDTO) -> Dict[str, Any]:
    return {
        "counter_party_id": dto.counter_party_id,
        "book_id": dto.book_id,
        "maturity_date": dto.maturity_date,
        "created_date": dto.created_date,
    }


def snapshot_dto_dict(dto: TradeDTO) -> Dict[str, Any]:
    return {
        "trade_id": dto.trade_id,
        "version": dto.version,
        "counter_party_id": dto.counter_party_id,
        "book_id": dto.book_id,
        "maturity_date": _iso(dto.maturity_date),
        "created_date": _iso(dto.created_date),
    }


def projection_to_dict(row: TradeProjection) -> Dict[str, Any]:
    return {
        "tradeId": row.trade_id,
        "version": row.version,
        "counterPartyId": row.counter_party_id,
        "bookId": row.book_id,
        "maturityDate": _iso(row.maturity_date),
        "createdDate": _iso(row.created_date),
        "expiredFlag": row.expired_flag,
        "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
    }


def exception_to_dict(record: TradeException) -> Dict[str, Any]:
    return {
        "id": record.id,
        "tradeId": record.trade_id,
        "requestId": record.request_id,
        "version": record.version,
        "counterPartyId": record.counter_party_id,
        "bookId": record.book_id,
        "maturityDate": _iso(record.maturity_date),
        "createdDate": _iso(record.created_date),
        "expiredFlag": record.expired_flag,
        "reason": record.reason,
        "recordedAt": record.recorded_at.isoformat(),
    }


def outcome_to_dict(outcome: Outcome) -> Dict[str, Any]:
    data = {
        "tradeId": outcome.trade_id,
        "version": outcome.version,
        "requestId": outcome.request_id,
        "status": outcome.status,
    }
    if not outcome.accepted:
        data["reason"] = outcome.reason
    return data
