"""Middleware that refuses API traffic until the database is reachable."""

from __future__ import annotations

from django.http import JsonResponse  # type: ignore

from .readiness import database_gate

# Paths served regardless of database state
EXEMPT_PREFIXES = ("/health/", "/static/")


class ReadinessMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith(EXEMPT_PREFIXES):
            return self.get_response(request)

        if not database_gate.is_ready and database_gate.initialize() != database_gate.READY:
            return JsonResponse(
                {"detail": "Сервис временно недоступен: база данных не готова."},
                status=503,
            )
        return self.get_response(request)
