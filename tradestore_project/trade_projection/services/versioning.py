from typing import Any, Dict, Optional

from django.db.models import Max

from ..dto import VersionResolution
from ..enums import VersionDecision
from ..models import TradeProjection


def latest_version(trade_id: str) -> Optional[int]:
    return TradeProjection.objects.filter(trade_id=trade_id).aggregate(latest=Max("version"))["latest"]


def resolve(trade_id: str, candidate_version: int) -> VersionResolution:
    """Decide whether ``candidate_version`` may be written for ``trade_id``.

    Reads the latest accepted version and compares. Equal versions are accepted
    as a retry of the same version; the caller must hold the trade's lock for the
    decision to stay true until the write.
    """
    latest = latest_version(trade_id)
    if latest is None:
        return VersionResolution(decision=VersionDecision.ACCEPT, latest_version=None)
    if candidate_version < latest:
        return VersionResolution(
            decision=VersionDecision.REJECT,
            latest_version=latest,
            reason=f"lower version received: {candidate_version} < {latest}",
        )
    return VersionResolution(decision=VersionDecision.ACCEPT, latest_version=latest)


def diff_snapshots(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, tuple]:
    keys = set(a.keys()) | set(b.keys())
    diff_kv = {}
    for k in keys:
        if a.get(k) != b.get(k):
            diff_kv[k] = (a.get(k), b.get(k))
    return diff_kv
