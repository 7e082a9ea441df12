"""
Booking Domain Events

Published on the message bus after the transaction that raised them
commits.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class BookingCreated(DomainEvent):
    """Event: checkout opened a booking awaiting payment."""
    booking_id: UUID
    session_id: UUID
    user_id: int
    price_cents: int


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: payment succeeded and the seat was taken

    Triggers:
    - In-app "booking confirmed" notification
    """
    booking_id: UUID
    session_id: Optional[UUID]
    user_id: int
    payment_intent_id: str


@dataclass
class BookingFailed(DomainEvent):
    """
    Event: booking ended in a failed_* status

    Triggers:
    - In-app "booking failed" notification
    """
    booking_id: UUID
    session_id: Optional[UUID]
    user_id: int
    status: str


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: a confirmed booking was cancelled

    Triggers:
    - Gateway refund, when ``refund_requested``
    """
    booking_id: UUID
    session_id: Optional[UUID]
    user_id: int
    refund_requested: bool
    payment_intent_id: str


@dataclass
class BookingRefunded(DomainEvent):
    """
    Event: the gateway confirmed the refund

    Triggers:
    - In-app "booking refunded" notification
    """
    booking_id: UUID
    session_id: Optional[UUID]
    user_id: int
    status: str
