"""Booking domain models for the marina CRM."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class Booking(models.Model):
    """Бронирование места яхт-клуба для судна."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Ожидает оплаты")
        CONFIRMED = "confirmed", _("Подтверждено")
        ACTIVE = "active", _("Активно")
        COMPLETED = "completed", _("Завершено")
        CANCELLED = "cancelled", _("Отменено")

    club = models.ForeignKey(
        "clubs.Club",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    berth = models.ForeignKey(
        "clubs.Berth",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    vessel = models.ForeignKey(
        "vessels.Vessel",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    vessel_owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    tariff = models.ForeignKey(
        "tariffs.Tariff",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    notes = models.TextField(blank=True)
    auto_renewal = models.BooleanField(default=False)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Бронирование")
        verbose_name_plural = _("Бронирования")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["berth", "start_date", "end_date"]),
            models.Index(fields=["vessel", "start_date", "end_date"]),
            models.Index(fields=["status"]),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} berth {self.berth_id} ({self.start_date} - {self.end_date})"

    @property
    def period(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_cancelled(self) -> bool:
        return self.status == self.Status.CANCELLED

    def mark_cancelled(self) -> None:
        self.status = self.Status.CANCELLED
        self.cancelled_at = timezone.now()
        self.save(update_fields=["status", "cancelled_at", "updated_at"])

    def mark_confirmed(self) -> None:
        self.status = self.Status.CONFIRMED
        self.save(update_fields=["status", "updated_at"])
