from __future__ import annotations

from django.contrib import admin

from .models import Berth, Club


class BerthInline(admin.TabularInline):
    model = Berth
    extra = 0


@admin.register(Club)
class ClubAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "season", "total_berths", "base_price", "is_active", "is_validated")
    list_filter = ("is_active", "is_validated", "season")
    search_fields = ("name", "address", "owner__email")
    readonly_fields = ("created_at", "updated_at")
    inlines = [BerthInline]


@admin.register(Berth)
class BerthAdmin(admin.ModelAdmin):
    list_display = ("number", "club", "length", "width", "price_per_day", "is_available")
    list_filter = ("is_available", "club")
    search_fields = ("number", "club__name")
