import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("courtside")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Pending waitlist entries of sessions that already started
    "expire-stale-waitlist-entries": {
        "task": "waitlist.expire_stale_waitlist_entries",
        "schedule": crontab(minute="*/15"),
    },
    # Overbooked but paid bookings awaiting reconciliation
    "report-overbooked-refunds": {
        "task": "bookings.report_overbooked_refunds",
        "schedule": crontab(minute=5),
        "options": {"expires": 3000},
    },
}
