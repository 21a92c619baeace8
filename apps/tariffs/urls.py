"""URL routing for tariffs and booking rules."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BookingRuleViewSet, TariffViewSet

router = DefaultRouter()
router.register(r"tariffs", TariffViewSet, basename="tariff")
router.register(r"booking-rules", BookingRuleViewSet, basename="booking-rule")

urlpatterns = [
    path("", include(router.urls)),
]
