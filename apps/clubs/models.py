"""Club and berth models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Dimensions, normalize_months

# Defaults for berths generated together with a new club
DEFAULT_BERTH_LENGTH = Decimal("20.00")
DEFAULT_BERTH_WIDTH = Decimal("5.00")


class Club(models.Model):
    """Яхт-клуб (марина)."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="owned_clubs",
    )
    managers = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="managed_clubs",
    )
    name = models.CharField(_("Название"), max_length=255)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255)
    latitude = models.DecimalField(max_digits=10, decimal_places=7)
    longitude = models.DecimalField(max_digits=10, decimal_places=7)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    website = models.URLField(blank=True)
    total_berths = models.PositiveIntegerField(default=0)
    min_rental_period = models.PositiveIntegerField(default=1, help_text=_("В днях."))
    max_rental_period = models.PositiveIntegerField(default=365, help_text=_("В днях."))
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Базовая цена за день."),
    )
    min_price_per_month = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    season = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Год навигационного сезона."),
    )
    rental_months = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Месяцы навигации (1-12), в которые сдаются места."),
    )
    booking_rules_text = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    is_validated = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Яхт-клуб")
        verbose_name_plural = _("Яхт-клубы")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        try:
            self.rental_months = normalize_months(self.rental_months)
        except ValueError as exc:
            raise ValidationError({"rental_months": str(exc)})
        if self.min_rental_period > self.max_rental_period:
            raise ValidationError(_("Минимальный срок аренды больше максимального."))

    def refresh_total_berths(self) -> None:
        self.total_berths = self.berths.count()
        self.save(update_fields=["total_berths", "updated_at"])


class Berth(models.Model):
    """Место (причал) яхт-клуба."""

    club = models.ForeignKey(Club, on_delete=models.CASCADE, related_name="berths")
    number = models.CharField(max_length=20)
    length = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Максимальная длина судна, м."),
    )
    width = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Ширина места, м."),
    )
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Цена за день, если отличается от базовой цены клуба."),
    )
    is_available = models.BooleanField(default=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Место")
        verbose_name_plural = _("Места")
        ordering = ["club_id", "number"]
        constraints = [
            models.UniqueConstraint(fields=["club", "number"], name="berth_unique_number_per_club"),
        ]

    def __str__(self) -> str:
        return f"{self.club} / {self.number}"

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions.from_raw(self.length, self.width)

    @property
    def daily_price(self) -> Decimal:
        if self.price_per_day is not None:
            return self.price_per_day
        return self.club.base_price
