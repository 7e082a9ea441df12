"""Waitlist Domain Events"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class WaitlistPromoted(DomainEvent):
    """
    Event: a waitlisted user was given a freed seat

    Triggers:
    - In-app "you're in" notification
    """
    session_id: UUID
    user_id: int
    entry_id: int
