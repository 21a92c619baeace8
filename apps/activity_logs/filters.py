"""FilterSet for the activity log listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import ActivityLog


class ActivityLogFilterSet(django_filters.FilterSet):
    created_after = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = ActivityLog
        fields = ["user", "entity_type", "entity_id", "activity_type"]
