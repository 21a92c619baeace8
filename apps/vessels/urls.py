"""URL routing for vessels."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import VesselViewSet

router = DefaultRouter()
router.register(r"", VesselViewSet, basename="vessel")

urlpatterns = [
    path("", include(router.urls)),
]
