import logging
from typing import List, Optional, Tuple

from ..dto import TradeDTO
from ..enums import ExpiredFlag
from ..mappers import dto_from_model, projection_attributes, snapshot_dto_dict
from ..models import TradeProjection
from .storage import storage_guard
from .versioning import diff_snapshots

logger = logging.getLogger(__name__)


def upsert(dto: TradeDTO) -> Tuple[TradeProjection, bool]:
    """Store ``dto`` as the row for its ``(trade_id, version)``.

    Re-applying an existing version overwrites its non-key attributes with the
    candidate's values. ``expired_flag`` is only written on insert, and an
    EXPIRED row keeps its maturity date.
    """
    attributes = projection_attributes(dto)
    row, created = TradeProjection.objects.get_or_create(
        trade_id=dto.trade_id,
        version=dto.version,
        defaults={**attributes, "expired_flag": dto.expired_flag},
    )
    if created:
        logger.info("projection inserted trade_id=%s version=%s expired_flag=%s",
                    dto.trade_id, dto.version, row.expired_flag)
        return row, True

    changes = diff_snapshots(snapshot_dto_dict(dto_from_model(row)), snapshot_dto_dict(dto))
    if not changes:
        logger.info("projection unchanged trade_id=%s version=%s", dto.trade_id, dto.version)
        return row, False

    logger.warning("same version resubmitted with different content trade_id=%s version=%s changes=%s",
                   dto.trade_id, dto.version, changes)
    changed_fields = sorted(name for name in changes if name in attributes)
    if row.expired_flag == ExpiredFlag.EXPIRED and "maturity_date" in changed_fields:
        logger.warning("maturity date kept on expired row trade_id=%s version=%s", dto.trade_id, dto.version)
        changed_fields.remove("maturity_date")
    if not changed_fields:
        return row, False
    for name in changed_fields:
        setattr(row, name, attributes[name])
    row.save(update_fields=changed_fields + ["updated_at"])
    return row, False


def get_latest_trade(trade_id: str) -> Optional[TradeProjection]:
    with storage_guard("projection_query", trade_id=trade_id):
        return TradeProjection.objects.filter(trade_id=trade_id).order_by("-version").first()


def get_trade_versions(trade_id: str) -> List[TradeProjection]:
    with storage_guard("projection_query", trade_id=trade_id):
        return list(TradeProjection.objects.filter(trade_id=trade_id).order_by("version"))


def get_active_trade_ids() -> List[str]:
    with storage_guard("projection_query"):
        return list(
            TradeProjection.objects.filter(expired_flag=ExpiredFlag.ACTIVE)
            .order_by("trade_id")
            .values_list("trade_id", flat=True)
            .distinct()
        )
