"""
Unit of Work Pattern

Wraps one database transaction and publishes the domain events raised
inside it only after the transaction has committed.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class StaleSnapshotError(Exception):
    """
    A conditional write matched no rows.

    Another unit of work committed to the same aggregate after it was
    read. Raising this inside a unit of work rolls the whole transaction
    back; callers that own a retry loop start over from a fresh read.
    """

    def __init__(self, aggregate: str, aggregate_id, expected):
        super().__init__(f"{aggregate} {aggregate_id} changed since read (expected {expected})")
        self.aggregate = aggregate
        self.aggregate_id = aggregate_id
        self.expected = expected


class AbstractUnitOfWork(ABC):

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        pass

    @abstractmethod
    def rollback(self):
        pass

    @abstractmethod
    def collect_events(self, aggregate):
        pass


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = booking_repo.get_by_id(booking_id)
            booking.confirm(payment_intent_id)
            uow.collect_events(booking)
            booking_repo.save(booking)
        # transaction committed, events published

    Exceptions raised inside the block roll the transaction back,
    discard the collected events and propagate to the caller.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)
        return False

    def commit(self):
        """Schedule publication of the collected events for after the commit."""
        events = self._events.copy()
        self._events.clear()

        if events:
            logger.debug(f"Scheduling {len(events)} events for publication after commit")
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        if self._events:
            logger.info(f"Rolling back unit of work, discarding {len(self._events)} events")
        self._events.clear()

    def collect_events(self, aggregate):
        """Move the events recorded on ``aggregate`` into this unit of work."""
        new_events = aggregate.events
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                f"Collected {len(new_events)} events from "
                f"{aggregate.__class__.__name__} (ID: {aggregate.id})"
            )

    def add_event(self, event: DomainEvent):
        """Record an event that is not owned by a loaded aggregate."""
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        message_bus.publish_events(events)
