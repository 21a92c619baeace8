"""Writing and describing activity log entries.

Logging is best effort: a failed write is reported through the module
logger and never reaches the caller, so the audited operation neither fails
nor rolls back because of it.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import DatabaseError, transaction  # type: ignore

from .models import ActivityLog

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "Система"

ENTITY_NAMES = {
    ActivityLog.EntityType.USER: "пользователя",
    ActivityLog.EntityType.CLUB: "яхт-клуб",
    ActivityLog.EntityType.VESSEL: "судно",
    ActivityLog.EntityType.BOOKING: "бронирование",
    ActivityLog.EntityType.BERTH: "место",
    ActivityLog.EntityType.PAYMENT: "платеж",
    ActivityLog.EntityType.TARIFF: "тариф",
    ActivityLog.EntityType.BOOKING_RULE: "правило бронирования",
    ActivityLog.EntityType.INCOME: "доход",
    ActivityLog.EntityType.EXPENSE: "расход",
    ActivityLog.EntityType.CASH_BOOK: "кассу",
    ActivityLog.EntityType.CASH_TRANSACTION: "операцию по кассе",
    ActivityLog.EntityType.OTHER: "объект",
}

# Fields that change on every save and carry no audit value
IGNORED_DIFF_FIELDS = frozenset({"updated_at"})

# Never copied into the log
SENSITIVE_FIELDS = frozenset({"password"})


def get_client_ip(request) -> str | None:
    """Получение IP адреса клиента"""
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def _actor_name(user) -> str:
    if user is None:
        return SYSTEM_ACTOR
    return getattr(user, "full_name", None) or getattr(user, "email", "") or "Пользователь"


def describe_activity(
    activity_type: str,
    entity_type: str,
    entity_id: int | None = None,
    user=None,
    entity_name: str | None = None,
) -> str:
    """Человекочитаемое описание действия на русском языке."""

    actor = _actor_name(user)
    target = entity_name or ENTITY_NAMES.get(entity_type, "объект")
    suffix = f" #{entity_id}" if entity_id else ""

    if activity_type == ActivityLog.ActivityType.CREATE:
        return f"{actor} создал(а) {target}{suffix}"
    if activity_type == ActivityLog.ActivityType.UPDATE:
        return f"{actor} обновил(а) {target}{suffix}"
    if activity_type == ActivityLog.ActivityType.DELETE:
        return f"{actor} удалил(а) {target}{suffix}"
    if activity_type == ActivityLog.ActivityType.LOGIN:
        return f"{actor} вошел(а) в систему"
    if activity_type == ActivityLog.ActivityType.LOGOUT:
        return f"{actor} вышел(а) из системы"
    if activity_type == ActivityLog.ActivityType.VIEW:
        return f"{actor} просмотрел(а) {target}{suffix}"
    return f"{actor} выполнил(а) действие с {target}{suffix}"


def snapshot(instance) -> dict[str, Any]:
    """Concrete field values of a model instance keyed by attname."""
    return {
        field.attname: getattr(instance, field.attname)
        for field in instance._meta.concrete_fields
        if field.attname not in SENSITIVE_FIELDS
    }


def diff_values(old: dict[str, Any] | None, new: dict[str, Any] | None) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (old, new) restricted to the keys whose values differ."""

    old = old or {}
    new = new or {}
    changed = [
        key
        for key in sorted(set(old) | set(new))
        if key not in IGNORED_DIFF_FIELDS and old.get(key) != new.get(key)
    ]
    return {key: old.get(key) for key in changed}, {key: new.get(key) for key in changed}


def log_activity(
    activity_type: str,
    entity_type: str,
    entity_id: int | None = None,
    user=None,
    description: str | None = None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    request=None,
    user_agent: str | None = None,
) -> ActivityLog | None:
    """Записывает действие в журнал; ошибки записи не пробрасываются."""

    if user is not None and not getattr(user, "is_authenticated", False):
        user = None
    if description is None:
        description = describe_activity(activity_type, entity_type, entity_id, user)

    ip_address = None
    if request is not None:
        ip_address = get_client_ip(request)
        if user_agent is None:
            user_agent = request.META.get("HTTP_USER_AGENT", "")

    try:
        # Savepoint keeps the surrounding transaction usable if the insert fails
        with transaction.atomic():
            return ActivityLog.objects.create(
                activity_type=activity_type,
                entity_type=entity_type,
                entity_id=entity_id,
                user=user,
                description=description,
                old_values=old_values or None,
                new_values=new_values or None,
                ip_address=ip_address,
                user_agent=user_agent or "",
            )
    except (DatabaseError, TypeError, ValueError):
        logger.exception(f"Failed to write activity log: {activity_type} {entity_type}#{entity_id}")
        return None
