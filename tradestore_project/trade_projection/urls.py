from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import ExceptionViewSet, TradeOperationViewSet, TradeViewSet, metrics

router = DefaultRouter()
router.register(r"trades", TradeViewSet, basename="trade")
router.register(r"exceptions", ExceptionViewSet, basename="exception")
router.register(r"operations", TradeOperationViewSet, basename="operation")

urlpatterns = router.urls + [
    path("metrics", metrics, name="metrics"),
]
