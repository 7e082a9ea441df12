"""
Capacity Coordinator

Runs a unit of work that reads and conditionally writes a session's
capacity, retrying the whole unit of work when a conditional write
loses to a concurrent commit. No locks are taken: conflicts are
detected by the version check and resolved by starting over.

Usage:
    def admit(uow, sessions):
        capacity = sessions.get(session_id)
        capacity.admit(user_id)
        uow.collect_events(capacity)
        sessions.save(capacity)

    coordinator.run(admit, session_id=session_id)
"""

import logging
import random
import time
from typing import Callable, Optional, TypeVar

from django.conf import settings  # type: ignore

from shared.application.uow import DjangoUnitOfWork, StaleSnapshotError
from shared.domain.errors import CapacityContentionError
from apps.sessions.repositories import DjangoSessionCapacityRepository

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CapacityCoordinator:

    def __init__(
        self,
        sessions: Optional[DjangoSessionCapacityRepository] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.sessions = sessions or DjangoSessionCapacityRepository()
        self.max_attempts = max_attempts or settings.CAPACITY_MAX_ATTEMPTS
        self.backoff_seconds = (
            settings.CAPACITY_RETRY_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        )
        self._sleep = sleep

    def run(self, operation: Callable[[DjangoUnitOfWork, DjangoSessionCapacityRepository], T], session_id=None) -> T:
        """
        Execute ``operation`` in a fresh unit of work until it commits.

        Any exception other than a stale snapshot propagates unchanged
        after the unit of work has rolled back.

        Raises:
            CapacityContentionError: every attempt lost to a concurrent writer
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                with DjangoUnitOfWork() as uow:
                    return operation(uow, self.sessions)
            except StaleSnapshotError as e:
                logger.info(f"Capacity commit conflict on attempt {attempt}/{self.max_attempts}: {e}")
                if attempt < self.max_attempts:
                    self._backoff(attempt)

        logger.error(
            f"Capacity commit for session {session_id or '<unknown>'} abandoned after {self.max_attempts} attempts"
        )
        raise CapacityContentionError(session_id, self.max_attempts)

    def _backoff(self, attempt: int):
        if self.backoff_seconds <= 0:
            return
        self._sleep(self.backoff_seconds * attempt * (0.5 + random.random()))
