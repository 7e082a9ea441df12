"""Joining the waitlist and promoting from it."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from shared.application.uow import StaleSnapshotError
from apps.bookings.application.cancellation import CancelSessionBookingCommand, CancelSessionBookingHandler
from apps.sessions.application.coordinator import CapacityCoordinator
from apps.sessions.domain.errors import AlreadyAttendingError, SessionNotFullError, WaitlistDisabledError
from apps.sessions.models import Session, SessionAttendee
from apps.sessions.repositories import DjangoSessionCapacityRepository
from apps.sessions.tests.factories import make_session, make_user, seat
from apps.waitlist.application.join import JoinWaitlistCommand, JoinWaitlistHandler
from apps.waitlist.application.promoter import (
    PromoteWaitlistCommand,
    PromoteWaitlistHandler,
    PromotionOutcome,
)
from apps.waitlist.domain.errors import AlreadyWaitlistedError
from apps.waitlist.models import WaitlistEntry
from apps.waitlist.tasks import expire_stale_waitlist_entries


def join(session, user) -> WaitlistEntry:
    return JoinWaitlistHandler().handle(JoinWaitlistCommand(session_id=session.pk, user_id=user.pk))


def release_seat(session, user) -> None:
    """Free a seat without triggering the post-commit promotion."""
    SessionAttendee.objects.filter(session=session, user=user).delete()
    Session.objects.filter(pk=session.pk).update(current_attendees=session.current_attendees - 1)
    session.refresh_from_db()


class JoinWaitlistTests(TestCase):
    def setUp(self) -> None:
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.session = seat(make_session(max_attendees=1), self.alice)

    def test_join_counts_entry(self) -> None:
        entry = join(self.session, self.bob)

        self.assertEqual(entry.status, WaitlistEntry.Status.PENDING)
        self.session.refresh_from_db()
        self.assertEqual(self.session.waitlist_count, 1)

    def test_join_rules(self) -> None:
        with self.assertRaises(AlreadyAttendingError):
            join(self.session, self.alice)

        open_session = make_session(max_attendees=3)
        with self.assertRaises(SessionNotFullError):
            join(open_session, self.bob)

        closed = seat(make_session(max_attendees=1, waitlist_enabled=False), self.alice)
        with self.assertRaises(WaitlistDisabledError):
            join(closed, self.bob)

    def test_join_twice_is_rejected_without_recounting(self) -> None:
        join(self.session, self.bob)

        with self.assertRaises(AlreadyWaitlistedError):
            join(self.session, self.bob)

        self.session.refresh_from_db()
        self.assertEqual(self.session.waitlist_count, 1)

    def test_rejoin_after_expiry_reuses_entry(self) -> None:
        first = join(self.session, self.bob)
        WaitlistEntry.objects.filter(pk=first.pk).update(status=WaitlistEntry.Status.EXPIRED)
        Session.objects.filter(pk=self.session.pk).update(waitlist_count=0)

        again = join(self.session, self.bob)

        self.assertEqual(again.pk, first.pk)
        self.assertEqual(again.status, WaitlistEntry.Status.PENDING)
        self.assertGreaterEqual(again.joined_at, first.joined_at)
        self.session.refresh_from_db()
        self.assertEqual(self.session.waitlist_count, 1)


class PromoteWaitlistTests(TestCase):
    def setUp(self) -> None:
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.session = seat(make_session(max_attendees=2), self.alice, self.bob)
        self.waiting = [make_user(name) for name in ("carol", "dave", "erin")]
        base = timezone.now() - timedelta(hours=1)
        for offset, user in enumerate(self.waiting):
            entry = join(self.session, user)
            WaitlistEntry.objects.filter(pk=entry.pk).update(joined_at=base + timedelta(minutes=offset))
        self.session.refresh_from_db()

    def _promote(self):
        return PromoteWaitlistHandler().handle(PromoteWaitlistCommand(session_id=self.session.pk))

    def test_earliest_entry_is_promoted(self) -> None:
        release_seat(self.session, self.alice)

        result = self._promote()

        self.assertEqual(result.outcome, PromotionOutcome.PROMOTED)
        self.assertEqual(result.user_id, self.waiting[0].pk)
        entry = WaitlistEntry.objects.get(session=self.session, user=self.waiting[0])
        self.assertEqual(entry.status, WaitlistEntry.Status.PROMOTED)
        self.assertIsNotNone(entry.notification_sent_at)
        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 2)
        self.assertEqual(self.session.waitlist_count, 2)
        self.assertTrue(SessionAttendee.objects.filter(session=self.session, user=self.waiting[0]).exists())

    def test_one_free_seat_is_filled_once(self) -> None:
        release_seat(self.session, self.alice)

        first = self._promote()
        second = self._promote()

        self.assertEqual(first.outcome, PromotionOutcome.PROMOTED)
        self.assertEqual(second.outcome, PromotionOutcome.NO_CAPACITY)
        self.assertEqual(
            WaitlistEntry.objects.filter(session=self.session, status=WaitlistEntry.Status.PROMOTED).count(), 1
        )

    def test_full_session_promotes_nobody(self) -> None:
        self.assertEqual(self._promote().outcome, PromotionOutcome.NO_CAPACITY)
        self.assertEqual(
            WaitlistEntry.objects.filter(session=self.session, status=WaitlistEntry.Status.PENDING).count(), 3
        )

    def test_seated_candidate_is_skipped(self) -> None:
        release_seat(self.session, self.alice)
        seat(self.session, self.waiting[0])
        release_seat(self.session, self.bob)

        result = self._promote()

        self.assertEqual(result.user_id, self.waiting[1].pk)
        skipped = WaitlistEntry.objects.get(session=self.session, user=self.waiting[0])
        self.assertEqual(skipped.status, WaitlistEntry.Status.EXPIRED)
        self.session.refresh_from_db()
        self.assertEqual(self.session.waitlist_count, 1)

    def test_empty_queue(self) -> None:
        WaitlistEntry.objects.filter(session=self.session).update(status=WaitlistEntry.Status.EXPIRED)
        release_seat(self.session, self.alice)

        self.assertEqual(self._promote().outcome, PromotionOutcome.QUEUE_EMPTY)

    def test_claimed_entry_cannot_be_claimed_again(self) -> None:
        entry = WaitlistEntry.objects.get(session=self.session, user=self.waiting[0])
        PromoteWaitlistHandler._claim(entry, WaitlistEntry.Status.PROMOTED)

        with self.assertRaises(StaleSnapshotError):
            PromoteWaitlistHandler._claim(entry, WaitlistEntry.Status.PROMOTED)

    def test_cancellation_promotes_after_commit(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            CancelSessionBookingHandler().handle(
                CancelSessionBookingCommand(session_id=self.session.pk, user_id=self.alice.pk)
            )

        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 2)
        self.assertEqual(self.session.waitlist_count, 2)
        self.assertTrue(SessionAttendee.objects.filter(session=self.session, user=self.waiting[0]).exists())
        self.assertFalse(SessionAttendee.objects.filter(session=self.session, user=self.alice).exists())

    def test_auto_promotion_can_be_switched_off(self) -> None:
        Session.objects.filter(pk=self.session.pk).update(auto_promote_waitlist=False)

        with self.captureOnCommitCallbacks(execute=True):
            CancelSessionBookingHandler().handle(
                CancelSessionBookingCommand(session_id=self.session.pk, user_id=self.alice.pk)
            )

        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 1)
        self.assertEqual(self.session.waitlist_count, 3)


class WaitlistRaceTests(TestCase):
    """Two promotion triggers for one freed seat and one pending entry."""

    def setUp(self) -> None:
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.carol = make_user("carol")
        self.session = seat(make_session(max_attendees=2), self.alice, self.bob)
        join(self.session, self.carol)
        self.session.refresh_from_db()
        release_seat(self.session, self.alice)
        self.repo = DjangoSessionCapacityRepository()

    def _handler(self) -> PromoteWaitlistHandler:
        return PromoteWaitlistHandler(coordinator=CapacityCoordinator(sessions=self.repo, backoff_seconds=0))

    def test_interleaved_triggers_promote_once(self) -> None:
        # Both triggers read the same snapshot and the same pending entry.
        stale_capacity = self.repo.get(self.session.pk)
        stale_entry = PromoteWaitlistHandler._next_pending(self.session.pk)

        first = self._handler().handle(PromoteWaitlistCommand(session_id=self.session.pk))
        fresh_capacity = self.repo.get(self.session.pk)

        with patch.object(self.repo, "get", side_effect=[stale_capacity, fresh_capacity]) as get, \
                patch.object(PromoteWaitlistHandler, "_next_pending", side_effect=[stale_entry]):
            second = self._handler().handle(PromoteWaitlistCommand(session_id=self.session.pk))

        self.assertEqual(first.outcome, PromotionOutcome.PROMOTED)
        self.assertEqual(first.user_id, self.carol.pk)
        self.assertEqual(second.outcome, PromotionOutcome.NO_CAPACITY)
        self.assertEqual(get.call_count, 2)

        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 2)
        self.assertEqual(self.session.waitlist_count, 0)
        self.assertEqual(
            WaitlistEntry.objects.filter(session=self.session, status=WaitlistEntry.Status.PROMOTED).count(), 1
        )
        self.assertEqual(SessionAttendee.objects.filter(session=self.session, user=self.carol).count(), 1)

    def test_trigger_with_stale_snapshot_finds_queue_empty(self) -> None:
        stale_capacity = self.repo.get(self.session.pk)

        first = self._handler().handle(PromoteWaitlistCommand(session_id=self.session.pk))
        with patch.object(self.repo, "get", side_effect=[stale_capacity]):
            second = self._handler().handle(PromoteWaitlistCommand(session_id=self.session.pk))

        self.assertEqual(first.outcome, PromotionOutcome.PROMOTED)
        self.assertEqual(second.outcome, PromotionOutcome.QUEUE_EMPTY)
        self.session.refresh_from_db()
        self.assertEqual(self.session.current_attendees, 2)
        self.assertEqual(self.session.waitlist_count, 0)


class CancelThenPromoteTests(TestCase):
    def test_single_seat_goes_to_the_waiting_player(self) -> None:
        player = make_user("player")
        waiting = make_user("waiting")
        session = seat(make_session(max_attendees=1), player)
        join(session, waiting)

        with self.captureOnCommitCallbacks(execute=True):
            CancelSessionBookingHandler().handle(
                CancelSessionBookingCommand(session_id=session.pk, user_id=player.pk)
            )

        session.refresh_from_db()
        roster = list(SessionAttendee.objects.filter(session=session).values_list("user_id", flat=True))
        self.assertEqual(roster, [waiting.pk])
        self.assertEqual(session.current_attendees, 1)
        self.assertEqual(session.waitlist_count, 0)
        entry = WaitlistEntry.objects.get(session=session, user=waiting)
        self.assertEqual(entry.status, WaitlistEntry.Status.PROMOTED)


class ExpireWaitlistTests(TestCase):
    def test_started_sessions_lose_their_queue(self) -> None:
        alice = make_user("alice")
        session = seat(make_session(max_attendees=1), alice)
        join(session, make_user("bob"))
        join(session, make_user("carol"))
        upcoming = seat(make_session(max_attendees=1), alice)
        join(upcoming, make_user("dave"))
        Session.objects.filter(pk=session.pk).update(starts_at=timezone.now() - timedelta(minutes=5))

        result = expire_stale_waitlist_entries()

        self.assertEqual(result, {"sessions": 1, "expired": 2})
        session.refresh_from_db()
        self.assertEqual(session.waitlist_count, 0)
        self.assertEqual(
            WaitlistEntry.objects.filter(session=session, status=WaitlistEntry.Status.EXPIRED).count(), 2
        )
        upcoming.refresh_from_db()
        self.assertEqual(upcoming.waitlist_count, 1)
