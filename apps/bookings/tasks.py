"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.finances.models import Payment

from .models import Booking
from .services import expire_immediate_payment

logger = logging.getLogger(__name__)


@shared_task(name="bookings.expire_immediate_payments")
def expire_immediate_payments() -> dict[str, int]:
    """
    Просрочка неоплаченных немедленных платежей.

    Немедленный платёж - тот, у которого срок оплаты отличается от момента
    создания не больше чем на MARINA_IMMEDIATE_PAYMENT_WINDOW_MINUTES.
    Если он не оплачен через MARINA_IMMEDIATE_PAYMENT_GRACE_MINUTES после
    создания, платёж становится просроченным, а ожидающее оплаты
    бронирование отменяется и место освобождается.

    Запускается каждые MARINA_PAYMENT_SWEEP_INTERVAL_SECONDS через Celery Beat.

    Returns:
        dict: {"expired": ..., "cancelled": ..., "skipped": ...}
    """
    now = timezone.now()
    grace_cutoff = now - timedelta(minutes=settings.MARINA_IMMEDIATE_PAYMENT_GRACE_MINUTES)

    candidates = Payment.objects.filter(
        status=Payment.Status.PENDING,
        created_at__lte=grace_cutoff,
    ).only("id", "due_date", "created_at").order_by("created_at", "id")
    # The window is checked in Python so the query stays portable across backends
    immediate_ids = [payment.pk for payment in candidates if payment.is_immediate]

    counters = {"expired": 0, "cancelled": 0, "skipped": 0}
    for payment_id in immediate_ids:
        try:
            outcome = expire_immediate_payment(payment_id)
        except Exception as e:
            logger.error(f"Error expiring payment {payment_id}: {e}", exc_info=True)
            counters["skipped"] += 1
            continue

        if outcome == "skipped":
            counters["skipped"] += 1
            continue
        counters["expired"] += 1
        if outcome == "cancelled":
            counters["cancelled"] += 1
            logger.info(f"Payment {payment_id} expired, its booking was cancelled automatically")

    if counters["expired"] or counters["skipped"]:
        logger.info(
            f"Payment expiry sweep: expired={counters['expired']}, "
            f"cancelled={counters['cancelled']}, skipped={counters['skipped']}"
        )
    return counters


@shared_task(name="bookings.update_booking_statuses")
def update_booking_statuses() -> dict[str, int]:
    """
    Перевод подтверждённых броней в ACTIVE с даты начала и в COMPLETED
    после даты окончания.

    Запускается ежедневно.
    """
    today = timezone.localdate()

    activated = Booking.objects.filter(
        status=Booking.Status.CONFIRMED,
        start_date__lte=today,
        end_date__gte=today,
    ).update(status=Booking.Status.ACTIVE, updated_at=timezone.now())

    completed = Booking.objects.filter(
        status__in=[Booking.Status.CONFIRMED, Booking.Status.ACTIVE],
        end_date__lt=today,
    ).update(status=Booking.Status.COMPLETED, updated_at=timezone.now())

    if activated or completed:
        logger.info(f"Bookings activated: {activated}, completed: {completed}")
    return {"activated": activated, "completed": completed}
