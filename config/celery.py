import os

from celery import Celery
from celery.schedules import crontab  # type: ignore
from django.conf import settings  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("marina_crm")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

def build_beat_schedule() -> dict:
    sweep_interval = float(settings.MARINA_PAYMENT_SWEEP_INTERVAL_SECONDS)
    return {
        # Просрочка неоплаченных немедленных платежей и отмена броней
        "expire-immediate-payments": {
            "task": "bookings.expire_immediate_payments",
            "schedule": sweep_interval,
            "options": {"expires": max(sweep_interval - 5, 5)},
        },
        # Перевод платежей с истекшим сроком в OVERDUE с пеней - каждый час
        "mark-overdue-payments": {
            "task": "finances.mark_overdue_payments",
            "schedule": crontab(minute=5),
        },
        # Активация и завершение броней по датам - ежедневно
        "update-booking-statuses": {
            "task": "bookings.update_booking_statuses",
            "schedule": crontab(hour=0, minute=10),
        },
    }


@app.on_after_configure.connect
def setup_beat_schedule(sender, source, **kwargs):
    # Django settings are only read once Celery loads its configuration
    source.beat_schedule = build_beat_schedule()
