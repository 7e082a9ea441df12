"""
Waitlist Promoter

Fills a freed seat with the earliest pending waitlist entry. Runs after
the commit that freed the seat; the promotion itself is a separate unit
of work that re-reads capacity and claims the entry with a conditional
update, so two triggers racing for one entry promote it once.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID
import logging

from django.utils import timezone  # type: ignore

from shared.application.uow import StaleSnapshotError
from apps.sessions.application.coordinator import CapacityCoordinator
from apps.sessions.domain.events import SeatReleased
from apps.waitlist.domain.events import WaitlistPromoted
from apps.waitlist.models import WaitlistEntry

logger = logging.getLogger(__name__)

# Bounds how many already-seated candidates one trigger skips over.
MAX_SKIPPED_ENTRIES = 10


class PromotionOutcome(Enum):
    PROMOTED = 'promoted'
    SKIPPED = 'skipped'
    QUEUE_EMPTY = 'queue_empty'
    NO_CAPACITY = 'no_capacity'
    SESSION_NOT_FOUND = 'session_not_found'


@dataclass
class PromoteWaitlistCommand:
    session_id: UUID


@dataclass(frozen=True)
class PromotionResult:
    outcome: PromotionOutcome
    user_id: Optional[int] = None


class PromoteWaitlistHandler:
    """
    Steps, inside one unit of work:
    1. Re-read capacity; no free seat -> abort, nothing written
    2. Take the earliest pending entry; none -> no-op
    3. Claim it with UPDATE ... WHERE status = pending
    4. Seat the user and decrement ``waitlist_count``
    5. Conditional commit; ``WaitlistPromoted`` is published afterwards

    A candidate who already holds a seat is expired instead and the next
    entry is tried.
    """

    def __init__(self, coordinator=None, clock=timezone.now):
        self.coordinator = coordinator or CapacityCoordinator()
        self.clock = clock

    def handle(self, command: PromoteWaitlistCommand) -> PromotionResult:
        for _ in range(MAX_SKIPPED_ENTRIES + 1):
            result = self.coordinator.run(
                lambda uow, sessions: self._promote_next(uow, sessions, command.session_id),
                session_id=command.session_id,
            )
            if result.outcome != PromotionOutcome.SKIPPED:
                break

        logger.info(f"Waitlist promotion for session {command.session_id}: {result.outcome.value}")
        return result

    def _promote_next(self, uow, sessions, session_id) -> PromotionResult:
        capacity = sessions.get(session_id)
        if capacity is None:
            return PromotionResult(PromotionOutcome.SESSION_NOT_FOUND)
        if capacity.is_full:
            return PromotionResult(PromotionOutcome.NO_CAPACITY)

        entry = self._next_pending(session_id)
        if entry is None:
            return PromotionResult(PromotionOutcome.QUEUE_EMPTY)

        if capacity.has_attendee(entry.user_id):
            self._claim(entry, WaitlistEntry.Status.EXPIRED)
            capacity.drop_waitlist_entry()
            sessions.save(capacity)
            logger.info(f"Waitlist entry {entry.pk} expired: user {entry.user_id} already seated")
            return PromotionResult(PromotionOutcome.SKIPPED, entry.user_id)

        self._claim(entry, WaitlistEntry.Status.PROMOTED, notification_sent_at=self.clock())
        capacity.promote_from_waitlist(entry.user_id)
        uow.collect_events(capacity)
        sessions.save(capacity)
        uow.add_event(WaitlistPromoted(
            aggregate_id=session_id,
            session_id=session_id,
            user_id=entry.user_id,
            entry_id=entry.pk,
        ))
        return PromotionResult(PromotionOutcome.PROMOTED, entry.user_id)

    @staticmethod
    def _next_pending(session_id) -> Optional[WaitlistEntry]:
        return (
            WaitlistEntry.objects
            .filter(session_id=session_id, status=WaitlistEntry.Status.PENDING)
            .order_by('joined_at', 'id')
            .first()
        )

    @staticmethod
    def _claim(entry: WaitlistEntry, status: str, **fields):
        claimed = WaitlistEntry.objects.filter(
            pk=entry.pk, status=WaitlistEntry.Status.PENDING
        ).update(status=status, **fields)
        if not claimed:
            raise StaleSnapshotError('WaitlistEntry', entry.pk, WaitlistEntry.Status.PENDING)


def promote_on_seat_released(event: SeatReleased):
    """Message bus subscriber: promote when the released seat can be refilled."""
    if not event.auto_promote_waitlist or event.seats_left <= 0:
        return
    PromoteWaitlistHandler().handle(PromoteWaitlistCommand(session_id=event.session_id))

