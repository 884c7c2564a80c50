import logging
import uuid

from django.http import HttpResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .mappers import dto_from_payload, outcome_to_dict, projection_to_dict
from .serializers import ExceptionQuerySerializer, SweepSerializer, TradeBatchSerializer, TradeCandidateSerializer
from .services.audit import get_exceptions_for_request, get_exceptions_for_trade, get_exceptions_in_range
from .services.expiry import sweep
from .services.projection import get_active_trade_ids, get_latest_trade, get_trade_versions
from .services.storage import TransientStorageFailure
from .services.use_cases import process_batch, process_trade
from .validators import MalformedCandidate

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = "1"


def _retryable(exc: TransientStorageFailure) -> Response:
    return Response({"detail": f"Storage unavailable, retry: {exc}"}, status=503,
                    headers={"Retry-After": RETRY_AFTER_SECONDS})


class TradeViewSet(viewsets.GenericViewSet):
    lookup_field = "trade_id"
    lookup_value_regex = "[^/]+"

    def list(self, request):
        try:
            trade_ids = get_active_trade_ids()
        except TransientStorageFailure as e:
            return _retryable(e)
        return Response({"activeTradeIds": trade_ids}, status=200)

    def retrieve(self, request, trade_id=None):
        try:
            row = get_latest_trade(trade_id)
        except TransientStorageFailure as e:
            return _retryable(e)
        if row is None:
            return Response({"detail": "No projection exists for this trade."}, status=404)
        return Response(projection_to_dict(row), status=200)

    @action(detail=True, methods=["get"])
    def versions(self, request, trade_id=None):
        try:
            rows = get_trade_versions(trade_id)
        except TransientStorageFailure as e:
            return _retryable(e)
        return Response({"tradeId": trade_id, "versions": [projection_to_dict(r) for r in rows]}, status=200)

    @action(detail=True, methods=["get"], url_path="exceptions")
    def trade_exceptions(self, request, trade_id=None):
        try:
            records = get_exceptions_for_trade(trade_id)
        except TransientStorageFailure as e:
            return _retryable(e)
        return Response({"tradeId": trade_id, "exceptions": records}, status=200)


class ExceptionViewSet(viewsets.ViewSet):
    def list(self, request):
        s = ExceptionQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)
        query = s.validated_data
        try:
            if query.get("requestId"):
                records = get_exceptions_for_request(query["requestId"], contains=query["match"] == "contains")
            elif query.get("tradeId"):
                records = get_exceptions_for_trade(query["tradeId"])
            else:
                records = get_exceptions_in_range(query["start"], query["end"])
        except TransientStorageFailure as e:
            return _retryable(e)
        return Response({"exceptions": records}, status=200)


class TradeOperationViewSet(viewsets.ViewSet):
    @action(detail=False, methods=["post"])
    def process(self, request):
        s = TradeCandidateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        dto = dto_from_payload(s.validated_data, request_id=str(uuid.uuid4()))
        try:
            outcome = process_trade(dto)
        except MalformedCandidate as e:
            return Response({"detail": str(e)}, status=400)
        except TransientStorageFailure as e:
            return _retryable(e)
        return Response(outcome_to_dict(outcome), status=200)

    @action(detail=False, methods=["post"], url_path="process-batch", url_name="process-batch")
    def process_many(self, request):
        s = TradeBatchSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        request_id = s.validated_data.get("requestId") or str(uuid.uuid4())
        dtos = [dto_from_payload(item, request_id=request_id) for item in s.validated_data["trades"]]
        try:
            outcomes = process_batch(dtos, request_id=request_id)
        except MalformedCandidate as e:
            return Response({"detail": str(e)}, status=400)
        except TransientStorageFailure as e:
            return _retryable(e)
        return Response({"requestId": request_id, "outcomes": [outcome_to_dict(o) for o in outcomes]}, status=200)

    @action(detail=False, methods=["post"], url_path="sweep", url_name="sweep")
    def run_sweep(self, request):
        s = SweepSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        today = s.validated_data.get("today")
        try:
            transitioned = sweep(today=today)
        except TransientStorageFailure as e:
            return _retryable(e)
        logger.info("manual expiry sweep transitioned=%s", transitioned)
        return Response({"transitioned": transitioned, "today": today.isoformat() if today else None}, status=200)


def metrics(request):
    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
