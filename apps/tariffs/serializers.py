"""Serializers for tariffs and booking rules."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.clubs.models import Berth
from shared.domain.value_objects import normalize_months, to_decimal

from .models import BookingRule, Tariff


class TariffSerializer(serializers.ModelSerializer):
    """Тариф; места (`berths`) должны принадлежать клубу тарифа."""

    berths = serializers.PrimaryKeyRelatedField(
        many=True,
        queryset=Berth.objects.all(),
        required=False,
    )

    class Meta:
        model = Tariff
        fields = [
            "id",
            "club",
            "name",
            "type",
            "amount",
            "season",
            "months",
            "monthly_amounts",
            "start_date",
            "end_date",
            "berths",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def _current(self, attrs, name, default=None):
        if name in attrs:
            return attrs[name]
        return getattr(self.instance, name, default)

    def validate(self, attrs):  # type: ignore
        club = self._current(attrs, "club")
        tariff_type = self._current(attrs, "type")

        if tariff_type == Tariff.Type.MONTHLY_PAYMENT:
            try:
                months = normalize_months(self._current(attrs, "months"))
            except (TypeError, ValueError):
                raise serializers.ValidationError({"months": "Месяца должны быть в диапазоне от 1 до 12."})
            if not months:
                raise serializers.ValidationError(
                    {"months": "Для помесячной оплаты необходимо выбрать хотя бы один месяц."}
                )
            attrs["months"] = months
            attrs["monthly_amounts"] = self._normalize_monthly_amounts(
                self._current(attrs, "monthly_amounts"), months
            )
        else:
            attrs["months"] = None
            attrs["monthly_amounts"] = None

        start_date = self._current(attrs, "start_date")
        end_date = self._current(attrs, "end_date")
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({"end_date": "Дата окончания раньше даты начала."})

        berths = attrs.get("berths")
        if berths and club is not None and any(berth.club_id != club.pk for berth in berths):
            raise serializers.ValidationError(
                {"berths": "Некоторые места не найдены или не принадлежат этому клубу."}
            )
        if self.instance is not None and "club" in attrs and "berths" not in attrs:
            if self.instance.berths.exclude(club=club).exists():
                raise serializers.ValidationError(
                    {"berths": "Некоторые места не найдены или не принадлежат этому клубу."}
                )
        return attrs

    @staticmethod
    def _normalize_monthly_amounts(raw, months: list[int]) -> dict[str, str] | None:
        if not raw:
            return None
        if not isinstance(raw, dict):
            raise serializers.ValidationError({"monthly_amounts": "Ожидается объект {месяц: сумма}."})
        result: dict[str, str] = {}
        for key, value in raw.items():
            try:
                month = normalize_months([key])[0]
                amount = to_decimal(value, "monthly_amount")
            except (TypeError, ValueError):
                raise serializers.ValidationError({"monthly_amounts": f"Неверное значение для месяца {key}."})
            if amount < Decimal("0"):
                raise serializers.ValidationError({"monthly_amounts": "Сумма не может быть отрицательной."})
            if month not in months:
                raise serializers.ValidationError(
                    {"monthly_amounts": f"Месяц {month} не входит в месяцы тарифа."}
                )
            result[str(month)] = str(amount)
        return result


class BookingRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingRule
        fields = [
            "id",
            "club",
            "tariff",
            "rule_type",
            "description",
            "parameters",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate(self, attrs):  # type: ignore
        club = attrs.get("club", getattr(self.instance, "club", None))
        tariff = attrs.get("tariff", getattr(self.instance, "tariff", None))
        if tariff is not None and club is not None and tariff.club_id != club.pk:
            raise serializers.ValidationError({"tariff": "Тариф не принадлежит выбранному клубу."})

        rule_type = attrs.get("rule_type", getattr(self.instance, "rule_type", BookingRule.RuleType.CUSTOM))
        parameters = attrs.get("parameters", getattr(self.instance, "parameters", None))
        attrs["parameters"] = self._validate_parameters(rule_type, parameters)
        return attrs

    @staticmethod
    def _validate_parameters(rule_type: str, parameters):
        if parameters is not None and not isinstance(parameters, dict):
            raise serializers.ValidationError({"parameters": "Ожидается объект."})
        parameters = dict(parameters or {})

        if rule_type == BookingRule.RuleType.REQUIRE_PAYMENT_MONTHS:
            try:
                months = normalize_months(parameters.get("months"))
            except (TypeError, ValueError):
                raise serializers.ValidationError({"parameters": "Месяца должны быть в диапазоне от 1 до 12."})
            if not months:
                raise serializers.ValidationError({"parameters": "Укажите месяцы обязательной оплаты."})
            parameters["months"] = months

        elif rule_type == BookingRule.RuleType.REQUIRE_DEPOSIT:
            amount = parameters.get("depositAmount")
            percentage = parameters.get("depositPercentage")
            if amount in (None, "") and percentage in (None, ""):
                raise serializers.ValidationError(
                    {"parameters": "Укажите depositAmount или depositPercentage."}
                )
            try:
                if amount not in (None, ""):
                    if to_decimal(amount, "depositAmount") < 0:
                        raise ValueError("negative")
                if percentage not in (None, ""):
                    value = to_decimal(percentage, "depositPercentage")
                    if value < 0 or value > 100:
                        raise ValueError("out of range")
            except ValueError:
                raise serializers.ValidationError({"parameters": "Неверный размер залога."})

        elif rule_type in (BookingRule.RuleType.MIN_BOOKING_PERIOD, BookingRule.RuleType.MAX_BOOKING_PERIOD):
            days = parameters.get("days")
            if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
                raise serializers.ValidationError({"parameters": "Укажите количество дней (days > 0)."})

        return parameters or None
