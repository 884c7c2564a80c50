from django.urls import include, path

urlpatterns = [
    path("", include("trade_projection.urls")),
]
