"""Read-only API over the activity log."""

from __future__ import annotations

from rest_framework import viewsets  # type: ignore

from apps.core.permissions import IsSuperAdmin

from .filters import ActivityLogFilterSet
from .models import ActivityLog
from .serializers import ActivityLogSerializer


class ActivityLogViewSet(viewsets.ReadOnlyModelViewSet):
    """Журнал действий доступен только супер-администратору."""

    queryset = ActivityLog.objects.select_related("user").all()
    serializer_class = ActivityLogSerializer
    permission_classes = [IsSuperAdmin]
    filterset_class = ActivityLogFilterSet
