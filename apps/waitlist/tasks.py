"""Celery tasks for the waitlist."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .application.expiry import ExpireWaitlistHandler
from .models import WaitlistEntry

logger = logging.getLogger(__name__)


@shared_task(name="waitlist.expire_stale_waitlist_entries")
def expire_stale_waitlist_entries() -> dict[str, int]:
    """
    Expire pending entries of sessions that have already started.

    Runs every 15 minutes.

    Returns:
        dict: {"sessions": sessions touched, "expired": entries expired}
    """
    session_ids = (
        WaitlistEntry.objects
        .filter(status=WaitlistEntry.Status.PENDING, session__starts_at__lte=timezone.now())
        .order_by()
        .values_list("session_id", flat=True)
        .distinct()
    )

    handler = ExpireWaitlistHandler()
    sessions_touched = 0
    expired_total = 0
    for session_id in list(session_ids):
        try:
            expired_total += handler.handle(session_id)
            sessions_touched += 1
        except Exception as e:
            logger.error(f"Error expiring waitlist of session {session_id}: {e}", exc_info=True)

    return {"sessions": sessions_touched, "expired": expired_total}
