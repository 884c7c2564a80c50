from django.db import models
from django.utils import timezone

from .enums import ExpiredFlag


class TradeProjection(models.Model):
    trade_id = models.CharField(max_length=50)
    version = models.PositiveIntegerField()
    counter_party_id = models.CharField(max_length=50)
    book_id = models.CharField(max_length=50)
    maturity_date = models.DateField()
    created_date = models.DateField()
    expired_flag = models.CharField(max_length=8, choices=ExpiredFlag.choices, default=ExpiredFlag.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["trade_id", "version"], name="projection_trade_version_unique"),
            models.CheckConstraint(condition=models.Q(version__gte=1), name="projection_version_positive"),
        ]
        indexes = [
            models.Index(fields=["expired_flag", "maturity_date"], name="projection_expiry_scan"),
        ]

    def __str__(self):
        return f"{self.trade_id} v{self.version} ({self.expired_flag})"


class TradeException(models.Model):
    trade_id = models.CharField(max_length=50, db_index=True)
    request_id = models.CharField(max_length=64, db_index=True)
    version = models.PositiveIntegerField()
    counter_party_id = models.CharField(max_length=50)
    book_id = models.CharField(max_length=50)
    maturity_date = models.DateField(null=True, blank=True)
    created_date = models.DateField()
    expired_flag = models.CharField(max_length=8, choices=ExpiredFlag.choices)
    reason = models.TextField()
    recorded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["trade_id", "version", "request_id"], name="exception_delivery_unique"
            ),
        ]


class TradeLock(models.Model):
    trade_id = models.CharField(max_length=50, primary_key=True)
    created_at = models.DateTimeField(auto_now_add=True)
