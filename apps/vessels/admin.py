from __future__ import annotations

from django.contrib import admin

from .models import Vessel


@admin.register(Vessel)
class VesselAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "owner", "length", "width", "is_active", "is_validated")
    list_filter = ("type", "is_active", "is_validated")
    search_fields = ("name", "registration_number", "owner__email")
    readonly_fields = ("created_at", "updated_at")
