import unittest
from contextlib import contextmanager
from datetime import date, timedelta
from unittest.mock import MagicMock, patch

from django.db import DatabaseError

from trade_projection.dto import VersionResolution
from trade_projection.enums import ExpiredFlag, OutcomeStatus, RejectionRule, VersionDecision
from trade_projection.services import use_cases
from trade_projection.services.storage import TransientStorageFailure
from trade_projection.validators import MalformedCandidate

from .test_validators import TODAY, make_dto


@contextmanager
def _noop_atomic():
    yield


ACCEPT = VersionResolution(decision=VersionDecision.ACCEPT, latest_version=None)


class TestUseCases(unittest.TestCase):
    def setUp(self):
        self.audit = MagicMock()
        self.projection = MagicMock()
        self.versioning = MagicMock()
        self.versioning.resolve.return_value = ACCEPT
        self.lock = MagicMock()
        self.patches = [
            patch("trade_projection.services.use_cases.audit", self.audit),
            patch("trade_projection.services.use_cases.projection", self.projection),
            patch("trade_projection.services.use_cases.versioning", self.versioning),
            patch("trade_projection.services.use_cases._lock_trade", self.lock),
            patch("trade_projection.services.use_cases.transaction.atomic", _noop_atomic),
        ]
        for p in self.patches:
            p.start()
        self.addCleanup(lambda: [p.stop() for p in self.patches])

    def test_accepted_candidate_is_projected_under_lock(self):
        dto = make_dto(trade_id="T1", version=2)
        outcome = use_cases.process_trade(dto, today=TODAY)

        self.assertEqual(outcome.status, OutcomeStatus.ACCEPTED)
        self.assertTrue(outcome.accepted)
        self.lock.assert_called_once_with("T1")
        self.versioning.resolve.assert_called_once_with("T1", 2)
        self.projection.upsert.assert_called_once_with(dto)
        self.audit.append.assert_not_called()

    def test_rule_failure_short_circuits_version_check(self):
        dto = make_dto(maturity_date=TODAY - timedelta(days=1))
        outcome = use_cases.process_trade(dto, today=TODAY)

        self.assertEqual(outcome.status, OutcomeStatus.REJECTED)
        self.assertEqual(outcome.rule, RejectionRule.MATURITY_IN_PAST)
        self.versioning.resolve.assert_not_called()
        self.lock.assert_not_called()
        self.projection.upsert.assert_not_called()
        self.audit.append.assert_called_once_with(dto, outcome.reason)

    def test_version_conflict_goes_to_exception_sink(self):
        self.versioning.resolve.return_value = VersionResolution(
            decision=VersionDecision.REJECT, latest_version=2, reason="lower version received: 1 < 2"
        )
        dto = make_dto(version=1)
        outcome = use_cases.process_trade(dto, today=TODAY)

        self.assertEqual(outcome.status, OutcomeStatus.REJECTED)
        self.assertEqual(outcome.rule, RejectionRule.LOWER_VERSION)
        self.assertIn("1 < 2", outcome.reason)
        self.projection.upsert.assert_not_called()
        self.audit.append.assert_called_once_with(dto, "lower version received: 1 < 2")

    def test_expired_candidate_still_checked_for_version(self):
        dto = make_dto(maturity_date=TODAY - timedelta(days=3), expired_flag=ExpiredFlag.EXPIRED)
        use_cases.process_trade(dto, today=TODAY)
        self.versioning.resolve.assert_called_once()
        self.projection.upsert.assert_called_once_with(dto)

    def test_malformed_candidate_fails_before_storage(self):
        with self.assertRaises(MalformedCandidate):
            use_cases.process_trade(make_dto(trade_id=""), today=TODAY)
        self.lock.assert_not_called()
        self.versioning.resolve.assert_not_called()
        self.audit.append.assert_not_called()

    def test_projection_storage_error_is_retryable(self):
        self.projection.upsert.side_effect = DatabaseError("database is locked")
        with self.assertRaises(TransientStorageFailure) as ctx:
            use_cases.process_trade(make_dto(), today=TODAY)
        self.assertEqual(ctx.exception.operation, "projection_upsert")
        self.audit.append.assert_not_called()

    def test_exception_sink_error_is_retryable(self):
        self.audit.append.side_effect = DatabaseError("disk I/O error")
        with self.assertRaises(TransientStorageFailure) as ctx:
            use_cases.process_trade(make_dto(maturity_date=None), today=TODAY)
        self.assertEqual(ctx.exception.operation, "exception_append")
        self.projection.upsert.assert_not_called()

    @patch("trade_projection.services.use_cases.business_today", return_value=date(2030, 1, 1))
    def test_today_defaults_to_business_date(self, _):
        outcome = use_cases.process_trade(make_dto(maturity_date=date(2029, 12, 31)))
        self.assertEqual(outcome.status, OutcomeStatus.REJECTED)

    def test_process_batch_shares_request_id(self):
        dtos = [make_dto(trade_id="T1", request_id=None), make_dto(trade_id="T2", request_id="own")]
        outcomes = use_cases.process_batch(dtos, request_id="batch-1", today=TODAY)
        self.assertEqual([o.request_id for o in outcomes], ["batch-1", "own"])
        self.assertEqual(self.projection.upsert.call_count, 2)

    def test_process_batch_generates_request_id(self):
        outcomes = use_cases.process_batch([make_dto(request_id=None)], today=TODAY)
        self.assertTrue(outcomes[0].request_id)
