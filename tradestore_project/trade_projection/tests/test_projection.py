from dataclasses import replace
from datetime import timedelta

from django.test import TestCase

from trade_projection.enums import ExpiredFlag
from trade_projection.models import TradeProjection
from trade_projection.services.projection import get_active_trade_ids, get_latest_trade, get_trade_versions, upsert

from .test_validators import TODAY, make_dto


class TestProjectionWriter(TestCase):
    def test_insert_creates_row_with_candidate_values(self):
        row, created = upsert(make_dto(trade_id="T1", version=1, book_id="B9"))
        self.assertTrue(created)
        self.assertEqual(row.book_id, "B9")
        self.assertEqual(row.expired_flag, ExpiredFlag.ACTIVE)
        self.assertEqual(TradeProjection.objects.count(), 1)

    def test_reapplying_same_version_is_idempotent(self):
        dto = make_dto(trade_id="T1", version=1)
        upsert(dto)
        row, created = upsert(dto)
        self.assertFalse(created)
        self.assertEqual(TradeProjection.objects.filter(trade_id="T1").count(), 1)

    def test_same_version_with_new_content_replaces_attributes(self):
        upsert(make_dto(trade_id="T1", version=1, counter_party_id="CP-1"))
        row, created = upsert(make_dto(trade_id="T1", version=1, counter_party_id="CP-2"))
        self.assertFalse(created)
        row.refresh_from_db()
        self.assertEqual(row.counter_party_id, "CP-2")
        self.assertEqual(TradeProjection.objects.count(), 1)

    def test_new_version_adds_row_and_keeps_history(self):
        upsert(make_dto(trade_id="T1", version=1))
        upsert(make_dto(trade_id="T1", version=2, book_id="B2"))
        versions = get_trade_versions("T1")
        self.assertEqual([r.version for r in versions], [1, 2])
        self.assertEqual(versions[0].book_id, "B1")

    def test_expired_candidate_inserted_as_expired(self):
        row, _ = upsert(make_dto(maturity_date=TODAY - timedelta(days=1), expired_flag=ExpiredFlag.EXPIRED))
        self.assertEqual(row.expired_flag, ExpiredFlag.EXPIRED)

    def test_resubmission_never_reactivates_expired_row(self):
        dto = make_dto(trade_id="T1", version=1)
        upsert(dto)
        TradeProjection.objects.filter(trade_id="T1").update(expired_flag=ExpiredFlag.EXPIRED)
        upsert(replace(dto, book_id="B7"))
        row = TradeProjection.objects.get(trade_id="T1", version=1)
        self.assertEqual(row.expired_flag, ExpiredFlag.EXPIRED)
        self.assertEqual(row.book_id, "B7")

    def test_expired_row_keeps_its_maturity_date(self):
        dto = make_dto(trade_id="T1", version=1, maturity_date=TODAY - timedelta(days=1))
        upsert(dto)
        TradeProjection.objects.filter(trade_id="T1").update(expired_flag=ExpiredFlag.EXPIRED)

        _, created = upsert(replace(dto, maturity_date=TODAY + timedelta(days=30)))
        self.assertFalse(created)
        row = TradeProjection.objects.get(trade_id="T1", version=1)
        self.assertEqual(row.maturity_date, TODAY - timedelta(days=1))
        self.assertEqual(row.expired_flag, ExpiredFlag.EXPIRED)

    def test_latest_trade_is_highest_version(self):
        upsert(make_dto(trade_id="T1", version=3))
        upsert(make_dto(trade_id="T1", version=1))
        upsert(make_dto(trade_id="T2", version=9))
        self.assertEqual(get_latest_trade("T1").version, 3)
        self.assertIsNone(get_latest_trade("missing"))

    def test_active_trade_ids(self):
        upsert(make_dto(trade_id="T2", version=1))
        upsert(make_dto(trade_id="T1", version=1))
        upsert(make_dto(trade_id="T1", version=2))
        upsert(make_dto(trade_id="T3", version=1, expired_flag=ExpiredFlag.EXPIRED))
        self.assertEqual(get_active_trade_ids(), ["T1", "T2"])
