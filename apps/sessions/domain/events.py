"""
Session Domain Events

Raised by the capacity aggregate and published after the capacity
commit that produced them.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class SeatReleased(DomainEvent):
    """
    Event: an attendee left a session and its counter went down

    Triggers:
    - Waitlist promotion, when the session auto-promotes and has room
    """
    session_id: UUID
    user_id: int
    reason: str
    auto_promote_waitlist: bool
    seats_left: int


@dataclass
class AttendeeAdmitted(DomainEvent):
    """Event: a user took a seat, by payment or by waitlist promotion."""
    session_id: UUID
    user_id: int
    via: str
