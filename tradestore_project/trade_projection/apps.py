from django.apps import AppConfig


class TradeProjectionConfig(AppConfig):
    name = "trade_projection"
    verbose_name = "Trade Projection"
    default_auto_field = "django.db.models.BigAutoField"
