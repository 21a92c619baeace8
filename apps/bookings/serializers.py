"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.clubs.models import Berth, Club
from apps.finances.serializers import PaymentSerializer
from apps.tariffs.models import Tariff
from apps.vessels.models import Vessel

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Запрос на бронирование: период и цена рассчитываются на сервере."""

    club = serializers.PrimaryKeyRelatedField(queryset=Club.objects.all())
    berth = serializers.PrimaryKeyRelatedField(queryset=Berth.objects.all())
    vessel = serializers.PrimaryKeyRelatedField(queryset=Vessel.objects.all())
    tariff = serializers.PrimaryKeyRelatedField(
        queryset=Tariff.objects.all(),
        required=False,
        allow_null=True,
    )
    auto_renewal = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Детальный сериализатор бронирования с графиком платежей."""

    club_name = serializers.ReadOnlyField(source="club.name")
    berth_number = serializers.ReadOnlyField(source="berth.number")
    vessel_name = serializers.ReadOnlyField(source="vessel.name")
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "club",
            "club_name",
            "berth",
            "berth_number",
            "vessel",
            "vessel_name",
            "vessel_owner",
            "tariff",
            "start_date",
            "end_date",
            "status",
            "status_display",
            "total_price",
            "auto_renewal",
            "notes",
            "cancelled_at",
            "payments",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MonthlyAmountSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class BookingQuoteSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    days = serializers.IntegerField()
    months = serializers.ListField(child=serializers.IntegerField())
    tariff_type = serializers.CharField(allow_null=True)
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    deposit = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    monthly_amounts = MonthlyAmountSerializer(many=True)
