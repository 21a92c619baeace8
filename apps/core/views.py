"""Service level views."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .readiness import database_gate


class HealthCheckView(APIView):
    """Состояние сервиса и подключения к базе данных."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def get(self, request):  # type: ignore
        if not database_gate.is_ready:
            database_gate.initialize()
        ready = database_gate.is_ready
        data = {
            "status": "ok" if ready else "unavailable",
            "database": database_gate.state,
            "timestamp": timezone.now().isoformat(),
        }
        return Response(data, status=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE)
