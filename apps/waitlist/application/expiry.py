"""Expiry of waitlist entries that can no longer be promoted."""

from uuid import UUID
import logging

from apps.sessions.application.coordinator import CapacityCoordinator
from apps.waitlist.models import WaitlistEntry

logger = logging.getLogger(__name__)


class ExpireWaitlistHandler:
    """Expire every pending entry of a session, keeping ``waitlist_count`` in step."""

    def __init__(self, coordinator=None):
        self.coordinator = coordinator or CapacityCoordinator()

    def handle(self, session_id: UUID) -> int:
        def expire(uow, sessions) -> int:
            capacity = sessions.get(session_id)
            expired = WaitlistEntry.objects.filter(
                session_id=session_id, status=WaitlistEntry.Status.PENDING
            ).update(status=WaitlistEntry.Status.EXPIRED)
            if capacity is not None and expired:
                for _ in range(expired):
                    capacity.drop_waitlist_entry()
                sessions.save(capacity)
            return expired

        expired = self.coordinator.run(expire, session_id=session_id)
        if expired:
            logger.info(f"Expired {expired} waitlist entries of session {session_id}")
        return expired
