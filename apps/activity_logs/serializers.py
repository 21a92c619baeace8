from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import ActivityLog


class ActivityLogSerializer(serializers.ModelSerializer):
    user_email = serializers.ReadOnlyField(source="user.email")

    class Meta:
        model = ActivityLog
        fields = [
            "id",
            "activity_type",
            "entity_type",
            "entity_id",
            "user",
            "user_email",
            "description",
            "old_values",
            "new_values",
            "ip_address",
            "user_agent",
            "created_at",
        ]
        read_only_fields = fields
