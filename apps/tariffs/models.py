"""Tariff and booking rule models."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange, normalize_months, to_decimal


class Tariff(models.Model):
    """Тариф яхт-клуба."""

    class Type(models.TextChoices):
        SEASON_PAYMENT = "season_payment", _("Оплата всего сезона сразу")
        MONTHLY_PAYMENT = "monthly_payment", _("Помесячная оплата")

    club = models.ForeignKey("clubs.Club", on_delete=models.CASCADE, related_name="tariffs")
    name = models.CharField(_("Название"), max_length=255)
    type = models.CharField(max_length=20, choices=Type.choices)
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Сумма за сезон или за месяц."),
    )
    season = models.PositiveIntegerField(help_text=_("Год сезона."))
    months = models.JSONField(
        null=True,
        blank=True,
        help_text=_("Месяцы помесячной оплаты (1-12)."),
    )
    monthly_amounts = models.JSONField(
        null=True,
        blank=True,
        help_text=_("Сумма для отдельных месяцев: {\"6\": 1200}."),
    )
    start_date = models.DateField(null=True, blank=True, help_text=_("Начало действия тарифа."))
    end_date = models.DateField(null=True, blank=True, help_text=_("Окончание действия тарифа."))
    berths = models.ManyToManyField(
        "clubs.Berth",
        blank=True,
        related_name="tariffs",
        help_text=_("Пусто - тариф действует для всех мест клуба."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Тариф")
        verbose_name_plural = _("Тарифы")
        ordering = ["club_id", "-season", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.get_type_display()}, {self.season})"

    @property
    def is_monthly(self) -> bool:
        return self.type == self.Type.MONTHLY_PAYMENT

    @property
    def validity_range(self) -> DateRange | None:
        """Declared validity range; an open end stops at the bounds of that calendar year."""
        if self.start_date is None and self.end_date is None:
            return None
        start = self.start_date or self.end_date.replace(month=1, day=1)
        end = self.end_date or self.start_date.replace(month=12, day=31)
        return DateRange(start, end)

    def amount_for_month(self, month: int) -> Decimal:
        """Per-month override from `monthly_amounts`, else the flat amount."""
        overrides = self.monthly_amounts or {}
        value = overrides.get(str(month), overrides.get(month))
        if value is None or value == "":
            return to_decimal(self.amount, "amount")
        return to_decimal(value, f"monthly_amounts[{month}]")

    def normalized_months(self) -> list[int]:
        return normalize_months(self.months)


class BookingRule(models.Model):
    """Правило бронирования клуба; без тарифа применяется ко всем тарифам."""

    class RuleType(models.TextChoices):
        REQUIRE_PAYMENT_MONTHS = "require_payment_months", _("Оплата за определённые месяцы")
        MIN_BOOKING_PERIOD = "min_booking_period", _("Минимальный период бронирования")
        MAX_BOOKING_PERIOD = "max_booking_period", _("Максимальный период бронирования")
        REQUIRE_DEPOSIT = "require_deposit", _("Требуется залог")
        CUSTOM = "custom", _("Произвольное правило")

    club = models.ForeignKey("clubs.Club", on_delete=models.CASCADE, related_name="booking_rules")
    tariff = models.ForeignKey(
        Tariff,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="booking_rules",
    )
    rule_type = models.CharField(max_length=30, choices=RuleType.choices, default=RuleType.CUSTOM)
    description = models.TextField()
    parameters = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Правило бронирования")
        verbose_name_plural = _("Правила бронирования")
        ordering = ["club_id", "id"]

    def __str__(self) -> str:
        return f"{self.get_rule_type_display()}: {self.description[:50]}"

    def param(self, key: str, default=None):
        return (self.parameters or {}).get(key, default)
