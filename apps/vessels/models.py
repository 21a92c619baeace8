"""Vessel model."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Dimensions


class Vessel(models.Model):
    """Судно судовладельца."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="vessels",
    )
    name = models.CharField(_("Название"), max_length=255)
    type = models.CharField(_("Тип"), max_length=100, help_text=_("Яхта, катер, лодка и т.д."))
    length = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Длина, м."),
    )
    width = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Ширина, м."),
    )
    height_above_waterline = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    passenger_capacity = models.PositiveIntegerField(null=True, blank=True)
    registration_number = models.CharField(max_length=100, blank=True)
    technical_specs = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    is_validated = models.BooleanField(
        default=False,
        help_text=_("Проверено супер-администратором; только такие суда можно бронировать."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Судно")
        verbose_name_plural = _("Суда")
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions.from_raw(self.length, self.width)
