"""FilterSets for club and berth listings."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Berth, Club


class ClubFilterSet(django_filters.FilterSet):
    location = django_filters.CharFilter(method="filter_location")
    min_price = django_filters.NumberFilter(field_name="base_price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="base_price", lookup_expr="lte")
    available = django_filters.BooleanFilter(method="filter_available")

    class Meta:
        model = Club
        fields = ["owner", "season", "is_active", "is_validated"]

    def filter_location(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(Q(address__icontains=value) | Q(name__icontains=value))

    def filter_available(self, queryset, name, value):  # type: ignore
        if value:
            return queryset.filter(total_berths__gt=0)
        return queryset


class BerthFilterSet(django_filters.FilterSet):
    min_length = django_filters.NumberFilter(field_name="length", lookup_expr="gte")
    min_width = django_filters.NumberFilter(field_name="width", lookup_expr="gte")

    class Meta:
        model = Berth
        fields = ["club", "is_available"]
