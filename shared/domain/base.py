"""
Domain kernel.

Building blocks shared by every bounded context:
- Entity: object with identity, mutable
- ValueObject: immutable, compared by value
- Aggregate: consistency boundary that records domain events
- DomainEvent: something that happened, published after commit

Identity and timestamp fields are keyword-only so that subclasses can
declare their own required fields in any order.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Entity(ABC):
    """
    Object with a stable identity.

    Two entities are the same entity when their ids match, whatever
    the state of their other attributes.
    """
    id: UUID = field(default_factory=uuid4, kw_only=True)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable value, equal to any other instance with the same attributes."""


@dataclass(eq=False)
class Aggregate(Entity):
    """
    Aggregate root.

    Mutating methods record domain events with ``add_event``; the unit of
    work collects them and hands them to the message bus once the
    database transaction has committed.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Copy of the events recorded since the last ``clear_events``."""
        return self._events.copy()


@dataclass
class DomainEvent:
    """
    Base class for domain events.

    Events cross bounded-context boundaries: the context that raises one
    never imports the contexts that react to it.
    """
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=utcnow, kw_only=True)
    aggregate_id: Optional[UUID] = field(default=None, kw_only=True)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        return {
            'event_id': str(self.event_id),
            'event_type': self.event_type,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }
