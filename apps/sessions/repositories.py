"""
Session capacity persistence.

Loads a ``SessionCapacity`` snapshot and writes it back with a
conditional UPDATE on ``version``. A write that matches no row means a
concurrent unit of work committed first; the caller's transaction must
roll back and start again from a fresh read.
"""

import logging
from typing import Optional
from uuid import UUID

from django.utils import timezone  # type: ignore

from shared.application.uow import StaleSnapshotError
from apps.sessions.domain.capacity import SessionCapacity
from apps.sessions.models import Session, SessionAttendee

logger = logging.getLogger(__name__)


class DjangoSessionCapacityRepository:

    def get(self, session_id: UUID) -> Optional[SessionCapacity]:
        """
        Read the session row and its roster as one snapshot.

        The two reads are separate statements, so a writer may commit
        between them. The version is read again after the roster; if it
        moved, or the roster disagrees with the counter, the snapshot is
        torn and the caller must start over.

        Raises:
            StaleSnapshotError: a concurrent commit landed during the read
        """
        row = Session.objects.filter(pk=session_id).first()
        if row is None:
            return None
        attendees = set(
            SessionAttendee.objects.filter(session_id=row.pk).values_list('user_id', flat=True)
        )
        version = Session.objects.filter(pk=row.pk).values_list('version', flat=True).first()
        if version != row.version or len(attendees) != row.current_attendees:
            raise StaleSnapshotError('Session', row.pk, row.version)
        return self._to_domain(row, attendees)

    def save(self, capacity: SessionCapacity):
        """
        Commit the snapshot if the session is still at the version it was read at.

        Raises:
            StaleSnapshotError: another writer bumped the version first
        """
        updated = Session.objects.filter(pk=capacity.id, version=capacity.version).update(
            current_attendees=capacity.current_attendees,
            waitlist_count=capacity.waitlist_count,
            version=capacity.version + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            raise StaleSnapshotError('Session', capacity.id, capacity.version)

        removed = capacity.removed_attendees
        if removed:
            SessionAttendee.objects.filter(session_id=capacity.id, user_id__in=removed).delete()
        added = capacity.added_attendees
        if added:
            SessionAttendee.objects.bulk_create(
                [SessionAttendee(session_id=capacity.id, user_id=user_id) for user_id in added]
            )

        logger.debug(
            f"Session {capacity.id} saved at version {capacity.version + 1}: "
            f"{capacity.current_attendees}/{capacity.max_attendees}, +{len(added)} -{len(removed)}"
        )
        capacity.mark_persisted()

    @staticmethod
    def _to_domain(row: Session, attendees: set) -> SessionCapacity:
        return SessionCapacity(
            id=row.pk,
            max_attendees=row.max_attendees,
            current_attendees=row.current_attendees,
            starts_at=row.starts_at,
            attendees=attendees,
            waitlist_enabled=row.waitlist_enabled,
            waitlist_count=row.waitlist_count,
            auto_promote_waitlist=row.auto_promote_waitlist,
            cancellation_deadline_hours=row.cancellation_deadline_hours,
            refund_percentage=row.refund_percentage,
            version=row.version,
        )
