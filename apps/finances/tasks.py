"""Celery tasks for the finance domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import mark_overdue_payments as mark_overdue

logger = logging.getLogger(__name__)


@shared_task(name="finances.mark_overdue_payments")
def mark_overdue_payments() -> dict[str, int]:
    """Ежечасная отметка просроченных платежей с начислением пени."""

    overdue = mark_overdue()
    return {"overdue": overdue}
