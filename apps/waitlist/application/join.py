"""
Joining a session's waitlist.

Allowed only when the session is full and has its waitlist switched
on. The pending-entry write and the ``waitlist_count`` increment commit
together through the capacity coordinator.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID
import logging

from django.utils import timezone  # type: ignore

from shared.application.uow import StaleSnapshotError
from shared.domain.errors import NotFoundError, UnauthenticatedError
from apps.sessions.application.coordinator import CapacityCoordinator
from apps.waitlist.domain.errors import AlreadyWaitlistedError
from apps.waitlist.models import WaitlistEntry

logger = logging.getLogger(__name__)


@dataclass
class JoinWaitlistCommand:
    session_id: UUID
    user_id: Optional[int]


class JoinWaitlistHandler:
    """
    Raises:
        UnauthenticatedError: no caller
        NotFoundError: unknown session
        SessionNotFullError: seats are still available, book directly
        WaitlistDisabledError: the session has no waitlist
        AlreadyAttendingError: the caller already holds a seat
        AlreadyWaitlistedError: the caller already has a pending entry
    """

    def __init__(self, coordinator=None):
        self.coordinator = coordinator or CapacityCoordinator()

    def handle(self, command: JoinWaitlistCommand) -> WaitlistEntry:
        if command.user_id is None:
            raise UnauthenticatedError()

        def join(uow, sessions) -> WaitlistEntry:
            capacity = sessions.get(command.session_id)
            if capacity is None:
                raise NotFoundError('Session', command.session_id)

            capacity.enqueue_waitlist(command.user_id)

            entry = WaitlistEntry.objects.filter(
                session_id=command.session_id, user_id=command.user_id
            ).first()
            if entry is not None and entry.status == WaitlistEntry.Status.PENDING:
                raise AlreadyWaitlistedError(command.session_id, command.user_id)

            # Session first: a concurrent join for the same user loses here and retries.
            sessions.save(capacity)

            now = timezone.now()
            if entry is None:
                return WaitlistEntry.objects.create(
                    session_id=command.session_id,
                    user_id=command.user_id,
                    status=WaitlistEntry.Status.PENDING,
                    joined_at=now,
                )

            reopened = WaitlistEntry.objects.filter(pk=entry.pk, status=entry.status).update(
                status=WaitlistEntry.Status.PENDING,
                joined_at=now,
                notification_sent_at=None,
            )
            if not reopened:
                raise StaleSnapshotError('WaitlistEntry', entry.pk, entry.status)
            entry.refresh_from_db()
            return entry

        entry = self.coordinator.run(join, session_id=command.session_id)
        logger.info(f"User {command.user_id} joined waitlist of session {command.session_id}")
        return entry
