import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="TradeProjection",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("trade_id", models.CharField(max_length=50)),
                ("version", models.PositiveIntegerField()),
                ("counter_party_id", models.CharField(max_length=50)),
                ("book_id", models.CharField(max_length=50)),
                ("maturity_date", models.DateField()),
                ("created_date", models.DateField()),
                (
                    "expired_flag",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("EXPIRED", "Expired")],
                        default="ACTIVE",
                        max_length=8,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["expired_flag", "maturity_date"], name="projection_expiry_scan"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("trade_id", "version"), name="projection_trade_version_unique"),
                    models.CheckConstraint(condition=models.Q(("version__gte", 1)), name="projection_version_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TradeException",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("trade_id", models.CharField(db_index=True, max_length=50)),
                ("request_id", models.CharField(db_index=True, max_length=64)),
                ("version", models.PositiveIntegerField()),
                ("counter_party_id", models.CharField(max_length=50)),
                ("book_id", models.CharField(max_length=50)),
                ("maturity_date", models.DateField(blank=True, null=True)),
                ("created_date", models.DateField()),
                (
                    "expired_flag",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("EXPIRED", "Expired")],
                        max_length=8,
                    ),
                ),
                ("reason", models.TextField()),
                ("recorded_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("trade_id", "version", "request_id"), name="exception_delivery_unique"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TradeLock",
            fields=[
                ("trade_id", models.CharField(max_length=50, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
    ]
