"""Serializers for vessels."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Vessel


class VesselSerializer(serializers.ModelSerializer):
    owner_id = serializers.ReadOnlyField(source="owner.id")

    class Meta:
        model = Vessel
        fields = [
            "id",
            "owner_id",
            "name",
            "type",
            "length",
            "width",
            "height_above_waterline",
            "passenger_capacity",
            "registration_number",
            "technical_specs",
            "is_active",
            "is_validated",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner_id", "is_validated", "created_at", "updated_at"]
