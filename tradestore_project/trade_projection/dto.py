from dataclasses import dataclass
from datetime import date
from typing import Optional

from .enums import ExpiredFlag, OutcomeStatus, RejectionRule, VersionDecision


@dataclass(frozen=True)
class TradeDTO:
    trade_id: str
    version: int
    counter_party_id: str
    book_id: str
    maturity_date: Optional[date]
    created_date: date
    expired_flag: str = ExpiredFlag.ACTIVE
    request_id: Optional[str] = None


@dataclass(frozen=True)
class RuleResult:
    valid: bool
    reason: str = ""
    rule: Optional[str] = None

    @classmethod
    def ok(cls) -> "RuleResult":
        return cls(valid=True)

    @classmethod
    def invalid(cls, rule: RejectionRule, reason: str) -> "RuleResult":
        return cls(valid=False, reason=reason, rule=rule)


@dataclass(frozen=True)
class VersionResolution:
    decision: str
    latest_version: Optional[int]
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.decision == VersionDecision.ACCEPT


@dataclass(frozen=True)
class Outcome:
    status: str
    trade_id: str
    version: int
    request_id: Optional[str]
    reason: str = ""
    rule: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status == OutcomeStatus.ACCEPTED
