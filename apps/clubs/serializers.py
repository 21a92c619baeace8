"""Serializers for clubs and berths."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import normalize_months

from .models import Berth, Club


class BerthSerializer(serializers.ModelSerializer):
    club_name = serializers.ReadOnlyField(source="club.name")

    class Meta:
        model = Berth
        fields = [
            "id",
            "club",
            "club_name",
            "number",
            "length",
            "width",
            "price_per_day",
            "is_available",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "club_name", "created_at", "updated_at"]
        validators = []

    def validate(self, attrs):  # type: ignore
        club = attrs.get("club") or getattr(self.instance, "club", None)
        number = attrs.get("number") or getattr(self.instance, "number", None)
        if self.instance is not None and "club" in attrs and attrs["club"].pk != self.instance.club_id:
            raise serializers.ValidationError({"club": "Нельзя перенести место в другой клуб."})
        duplicates = Berth.objects.filter(club=club, number=number)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError({"number": "Место с таким номером уже существует."})
        return attrs


class ClubSerializer(serializers.ModelSerializer):
    """Яхт-клуб; при создании генерирует `total_berths` мест по умолчанию."""

    owner_id = serializers.ReadOnlyField(source="owner.id")
    owner_email = serializers.ReadOnlyField(source="owner.email")

    class Meta:
        model = Club
        fields = [
            "id",
            "owner_id",
            "owner_email",
            "name",
            "description",
            "address",
            "latitude",
            "longitude",
            "phone",
            "email",
            "website",
            "total_berths",
            "min_rental_period",
            "max_rental_period",
            "base_price",
            "min_price_per_month",
            "season",
            "rental_months",
            "booking_rules_text",
            "is_active",
            "is_validated",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "owner_id", "owner_email", "is_validated", "created_at", "updated_at"]

    def validate_rental_months(self, value):  # type: ignore
        try:
            return normalize_months(value)
        except (TypeError, ValueError):
            raise serializers.ValidationError("Месяцы должны быть числами от 1 до 12.")

    def validate(self, attrs):  # type: ignore
        min_period = attrs.get("min_rental_period", getattr(self.instance, "min_rental_period", 1))
        max_period = attrs.get("max_rental_period", getattr(self.instance, "max_rental_period", 365))
        if min_period > max_period:
            raise serializers.ValidationError(
                {"min_rental_period": "Минимальный срок аренды больше максимального."}
            )
        return attrs
