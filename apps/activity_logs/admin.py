from __future__ import annotations

from django.contrib import admin

from .models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "activity_type", "entity_type", "entity_id", "user", "ip_address")
    list_filter = ("activity_type", "entity_type")
    search_fields = ("description", "user__email")
    readonly_fields = [field.name for field in ActivityLog._meta.fields]
