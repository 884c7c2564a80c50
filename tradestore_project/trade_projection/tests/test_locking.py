from datetime import timedelta

from django.test import TransactionTestCase

from trade_projection.enums import ExpiredFlag
from trade_projection.models import TradeLock, TradeProjection
from trade_projection.services.use_cases import _resolve_and_project

from .test_validators import TODAY, make_dto


class TestResolveUnderTradeLock(TransactionTestCase):
    """Runs resolve-and-project against the real lock row and committed transactions."""

    def test_lower_version_after_higher_is_rejected(self):
        self.assertIsNone(_resolve_and_project(make_dto(trade_id="T1", version=2)))
        self.assertEqual(_resolve_and_project(make_dto(trade_id="T1", version=1)),
                         "lower version received: 1 < 2")

        self.assertTrue(TradeLock.objects.filter(trade_id="T1").exists())
        self.assertEqual(list(TradeProjection.objects.filter(trade_id="T1").values_list("version", flat=True)), [2])

    def test_lock_row_is_shared_by_every_version(self):
        _resolve_and_project(make_dto(trade_id="T1", version=1))
        _resolve_and_project(make_dto(trade_id="T1", version=3))
        _resolve_and_project(make_dto(trade_id="T2", version=1))

        self.assertEqual(TradeLock.objects.filter(trade_id="T1").count(), 1)
        self.assertEqual(sorted(TradeLock.objects.values_list("trade_id", flat=True)), ["T1", "T2"])

    def test_equal_version_reapplies_in_place(self):
        _resolve_and_project(make_dto(trade_id="T1", version=1, book_id="B1"))
        self.assertIsNone(_resolve_and_project(make_dto(trade_id="T1", version=1, book_id="B2")))

        row = TradeProjection.objects.get(trade_id="T1", version=1)
        self.assertEqual(row.book_id, "B2")
        self.assertEqual(row.expired_flag, ExpiredFlag.ACTIVE)
        self.assertEqual(row.maturity_date, TODAY + timedelta(days=30))
