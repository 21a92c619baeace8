"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "club",
        "berth",
        "vessel",
        "vessel_owner",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "club", "auto_renewal")
    search_fields = ("vessel__name", "vessel_owner__email", "club__name", "berth__number")
    readonly_fields = ("total_price", "cancelled_at", "created_at", "updated_at")
