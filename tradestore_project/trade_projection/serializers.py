from rest_framework import serializers

from .conf import business_today
from .enums import ExpiredFlag


class _RejectUnknownFieldsMixin:
    def validate(self, data):
        unknown = set(self.initial_data.keys()) - set(self.fields.keys())
        if unknown:
            raise serializers.ValidationError({k: "Unknown field." for k in sorted(unknown)})
        return data


class TradeCandidateSerializer(_RejectUnknownFieldsMixin, serializers.Serializer):
    tradeId        = serializers.CharField(max_length=50)
    version        = serializers.IntegerField(min_value=1)
    counterPartyId = serializers.CharField(max_length=50)
    bookId         = serializers.CharField(max_length=50)
    # A missing maturity date is a business rejection, not a malformed payload.
    maturityDate   = serializers.DateField(required=False, allow_null=True, default=None)
    createdDate    = serializers.DateField()
    expiredFlag    = serializers.ChoiceField(choices=ExpiredFlag.values, default=ExpiredFlag.ACTIVE)
    requestId      = serializers.CharField(max_length=64, required=False)


class TradeBatchSerializer(_RejectUnknownFieldsMixin, serializers.Serializer):
    requestId = serializers.CharField(max_length=64, required=False)
    trades    = serializers.ListField(child=serializers.DictField(), allow_empty=False)

    def validate_trades(self, value):
        validated, errors = [], {}
        for index, item in enumerate(value):
            s = TradeCandidateSerializer(data=item)
            if s.is_valid():
                validated.append(s.validated_data)
            else:
                errors[str(index)] = s.errors
        if errors:
            raise serializers.ValidationError(errors)
        return validated


class SweepSerializer(_RejectUnknownFieldsMixin, serializers.Serializer):
    today = serializers.DateField(required=False)

    def validate_today(self, value):
        current = business_today()
        if value > current:
            raise serializers.ValidationError(f"today must not be after the business date {current.isoformat()}.")
        return value


class ExceptionQuerySerializer(serializers.Serializer):
    requestId = serializers.CharField(required=False)
    tradeId   = serializers.CharField(required=False)
    match     = serializers.ChoiceField(choices=["exact", "contains"], default="exact")
    start     = serializers.DateField(required=False)
    end       = serializers.DateField(required=False)

    def validate(self, data):
        has_range = "start" in data or "end" in data
        if has_range and not ("start" in data and "end" in data):
            raise serializers.ValidationError("start and end must be provided together.")
        if has_range and data["start"] > data["end"]:
            raise serializers.ValidationError("start must not be after end.")
        if not (data.get("requestId") or data.get("tradeId") or has_range):
            raise serializers.ValidationError(
                "Provide 'requestId', 'tradeId' or a 'start'/'end' range, "
                "e.g. ?requestId=req-123 or ?tradeId=T1."
            )
        return data
