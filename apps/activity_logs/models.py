"""Activity log model."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ActivityLog(models.Model):
    """Запись журнала действий пользователя или системы."""

    class ActivityType(models.TextChoices):
        CREATE = "create", _("Создание")
        UPDATE = "update", _("Изменение")
        DELETE = "delete", _("Удаление")
        LOGIN = "login", _("Вход")
        LOGOUT = "logout", _("Выход")
        VIEW = "view", _("Просмотр")
        OTHER = "other", _("Другое")

    class EntityType(models.TextChoices):
        USER = "user", _("Пользователь")
        CLUB = "club", _("Яхт-клуб")
        VESSEL = "vessel", _("Судно")
        BOOKING = "booking", _("Бронирование")
        BERTH = "berth", _("Место")
        PAYMENT = "payment", _("Платеж")
        TARIFF = "tariff", _("Тариф")
        BOOKING_RULE = "booking_rule", _("Правило бронирования")
        INCOME = "income", _("Доход")
        EXPENSE = "expense", _("Расход")
        CASH_BOOK = "cash_book", _("Касса")
        CASH_TRANSACTION = "cash_transaction", _("Операция по кассе")
        OTHER = "other", _("Другое")

    activity_type = models.CharField(max_length=20, choices=ActivityType.choices)
    entity_type = models.CharField(max_length=20, choices=EntityType.choices)
    entity_id = models.PositiveBigIntegerField(null=True, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_logs",
        help_text=_("Пусто для системных действий."),
    )
    description = models.TextField(blank=True, default="")
    old_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Запись журнала действий")
        verbose_name_plural = _("Журнал действий")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "created_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["activity_type", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.activity_type} {self.entity_type}#{self.entity_id} ({self.created_at:%Y-%m-%d %H:%M})"
