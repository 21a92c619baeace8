from __future__ import annotations

from django.contrib import admin

from .models import BookingRule, Tariff


@admin.register(Tariff)
class TariffAdmin(admin.ModelAdmin):
    list_display = ("name", "club", "type", "amount", "season", "start_date", "end_date")
    list_filter = ("type", "season")
    search_fields = ("name", "club__name")
    filter_horizontal = ("berths",)


@admin.register(BookingRule)
class BookingRuleAdmin(admin.ModelAdmin):
    list_display = ("club", "tariff", "rule_type", "description")
    list_filter = ("rule_type",)
    search_fields = ("description", "club__name")
