"""
Session Capacity Aggregate

The consistency boundary for a session's seats. Every change to the
attendee counter, the attendee roster or the waitlist counter goes
through this aggregate, and the coordinator persists it with a single
conditional write on the session's ``version``.

Key invariants:
- 0 <= current_attendees <= max_attendees
- len(attendees) == current_attendees
- waitlist_count >= 0
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Set

from shared.domain.base import Aggregate
from apps.sessions.domain.errors import (
    AlreadyAttendingError,
    CapacityInvariantError,
    NotBookedError,
    SessionFullError,
    SessionNotFullError,
    WaitlistDisabledError,
)


class ReleaseReason:
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'


@dataclass(eq=False)
class SessionCapacity(Aggregate):
    """
    Capacity snapshot of one session, read inside a transaction.

    ``version`` is the session version the snapshot was read at; the
    coordinator commits only if nobody else has bumped it meanwhile.
    """

    max_attendees: int
    current_attendees: int
    starts_at: datetime
    attendees: Set[int] = field(default_factory=set)
    waitlist_enabled: bool = True
    waitlist_count: int = 0
    auto_promote_waitlist: bool = True
    cancellation_deadline_hours: int = 24
    refund_percentage: int = 100
    version: int = 0
    _loaded_attendees: FrozenSet[int] = field(default=frozenset(), init=False, repr=False)

    def __post_init__(self):
        self.attendees = set(self.attendees)
        self._loaded_attendees = frozenset(self.attendees)
        self._check_invariants()

    # ----- queries -----

    @property
    def seats_left(self) -> int:
        return self.max_attendees - self.current_attendees

    @property
    def is_full(self) -> bool:
        return self.current_attendees >= self.max_attendees

    def has_attendee(self, user_id: int) -> bool:
        return user_id in self.attendees

    def hours_until_start(self, now: datetime) -> float:
        return (self.starts_at - now).total_seconds() / 3600

    def refund_window_open(self, now: datetime) -> bool:
        """Cancelling at least ``cancellation_deadline_hours`` before start earns a refund."""
        return self.hours_until_start(now) >= self.cancellation_deadline_hours

    @property
    def should_promote_waitlist(self) -> bool:
        return self.auto_promote_waitlist and not self.is_full

    @property
    def added_attendees(self) -> Set[int]:
        return self.attendees - self._loaded_attendees

    @property
    def removed_attendees(self) -> Set[int]:
        return set(self._loaded_attendees - self.attendees)

    # ----- commands -----

    def admit(self, user_id: int, via: str = 'payment'):
        """
        Take a seat for ``user_id``.

        Raises:
            AlreadyAttendingError: the user already holds a seat
            SessionFullError: no seat left
        """
        if self.has_attendee(user_id):
            raise AlreadyAttendingError(self.id, user_id)
        if self.is_full:
            raise SessionFullError(self.id)

        self.attendees.add(user_id)
        self.current_attendees += 1
        self._check_invariants()

        from apps.sessions.domain.events import AttendeeAdmitted

        self.add_event(AttendeeAdmitted(
            aggregate_id=self.id,
            session_id=self.id,
            user_id=user_id,
            via=via,
        ))

    def release(self, user_id: int, reason: str):
        """
        Give up the seat held by ``user_id``.

        Raises:
            NotBookedError: the user holds no seat
        """
        if not self.has_attendee(user_id):
            raise NotBookedError(self.id, user_id)

        self.attendees.discard(user_id)
        self.current_attendees -= 1
        self._check_invariants()

        from apps.sessions.domain.events import SeatReleased

        self.add_event(SeatReleased(
            aggregate_id=self.id,
            session_id=self.id,
            user_id=user_id,
            reason=reason,
            auto_promote_waitlist=self.auto_promote_waitlist,
            seats_left=self.seats_left,
        ))

    def enqueue_waitlist(self, user_id: int):
        """
        Count a new pending waitlist entry.

        Joining is only allowed on a full session with the waitlist on.
        """
        if not self.is_full:
            raise SessionNotFullError(self.id)
        if not self.waitlist_enabled:
            raise WaitlistDisabledError(self.id)
        if self.has_attendee(user_id):
            raise AlreadyAttendingError(self.id, user_id)

        self.waitlist_count += 1

    def promote_from_waitlist(self, user_id: int):
        """Move a waitlisted user into a free seat."""
        self.admit(user_id, via='waitlist')
        self.drop_waitlist_entry()

    def drop_waitlist_entry(self):
        self.waitlist_count = max(self.waitlist_count - 1, 0)

    def mark_persisted(self):
        """Called by the coordinator once the conditional write has matched."""
        self.version += 1
        self._loaded_attendees = frozenset(self.attendees)

    def _check_invariants(self):
        if not 0 <= self.current_attendees <= self.max_attendees:
            raise CapacityInvariantError(
                f"Session {self.id}: current_attendees={self.current_attendees} "
                f"outside [0, {self.max_attendees}]"
            )
        if len(self.attendees) != self.current_attendees:
            raise CapacityInvariantError(
                f"Session {self.id}: {len(self.attendees)} attendees recorded "
                f"but current_attendees={self.current_attendees}"
            )
        if self.waitlist_count < 0:
            raise CapacityInvariantError(f"Session {self.id}: negative waitlist_count")
