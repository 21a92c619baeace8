"""URL routing for clubs and berths."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BerthViewSet, ClubViewSet

router = DefaultRouter()
router.register(r"clubs", ClubViewSet, basename="club")
router.register(r"berths", BerthViewSet, basename="berth")

urlpatterns = [
    path("", include(router.urls)),
]
