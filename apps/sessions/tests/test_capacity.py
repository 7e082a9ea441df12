"""Session capacity aggregate rules."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from apps.sessions.domain.capacity import ReleaseReason, SessionCapacity
from apps.sessions.domain.errors import (
    AlreadyAttendingError,
    CapacityInvariantError,
    NotBookedError,
    SessionFullError,
    SessionNotFullError,
    WaitlistDisabledError,
)
from apps.sessions.domain.events import AttendeeAdmitted, SeatReleased

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def capacity(**overrides) -> SessionCapacity:
    fields = {
        "id": uuid4(),
        "max_attendees": 2,
        "current_attendees": 0,
        "starts_at": NOW + timedelta(hours=30),
    }
    fields.update(overrides)
    return SessionCapacity(**fields)


def test_admit_takes_a_seat_and_records_event():
    session = capacity()

    session.admit(7)

    assert session.current_attendees == 1
    assert session.has_attendee(7)
    assert session.added_attendees == {7}
    [event] = session.events
    assert isinstance(event, AttendeeAdmitted)
    assert event.user_id == 7 and event.via == "payment"


def test_admit_refuses_full_session_and_duplicates():
    session = capacity(max_attendees=1)
    session.admit(1)

    with pytest.raises(AlreadyAttendingError):
        session.admit(1)
    with pytest.raises(SessionFullError):
        session.admit(2)
    assert session.current_attendees == 1


def test_release_frees_seat_and_reports_seats_left():
    session = capacity(current_attendees=2, attendees={1, 2})

    session.release(1, ReleaseReason.CANCELLED)

    assert session.current_attendees == 1
    assert session.removed_attendees == {1}
    [event] = session.events
    assert isinstance(event, SeatReleased)
    assert event.seats_left == 1
    assert event.reason == "cancelled"


def test_release_requires_a_seat():
    with pytest.raises(NotBookedError):
        capacity().release(1, ReleaseReason.CANCELLED)


def test_waitlist_only_on_full_session_with_waitlist():
    with pytest.raises(SessionNotFullError):
        capacity().enqueue_waitlist(3)
    with pytest.raises(WaitlistDisabledError):
        capacity(current_attendees=2, attendees={1, 2}, waitlist_enabled=False).enqueue_waitlist(3)
    with pytest.raises(AlreadyAttendingError):
        capacity(current_attendees=2, attendees={1, 2}).enqueue_waitlist(1)

    full = capacity(current_attendees=2, attendees={1, 2})
    full.enqueue_waitlist(3)
    assert full.waitlist_count == 1


def test_promotion_seats_user_and_shrinks_waitlist():
    session = capacity(current_attendees=1, attendees={1}, waitlist_count=2)

    session.promote_from_waitlist(5)

    assert session.has_attendee(5)
    assert session.waitlist_count == 1
    assert session.events[0].via == "waitlist"


def test_waitlist_count_never_negative():
    session = capacity()
    session.drop_waitlist_entry()
    assert session.waitlist_count == 0


def test_refund_window_is_inclusive_of_deadline():
    session = capacity(cancellation_deadline_hours=24)

    assert session.refund_window_open(NOW)
    assert session.refund_window_open(NOW + timedelta(hours=6))
    assert not session.refund_window_open(NOW + timedelta(hours=6, seconds=1))
    assert not session.refund_window_open(NOW + timedelta(hours=28))


def test_inconsistent_snapshot_is_rejected():
    with pytest.raises(CapacityInvariantError):
        capacity(current_attendees=3, attendees={1, 2, 3})
    with pytest.raises(CapacityInvariantError):
        capacity(current_attendees=1, attendees=set())


def test_mark_persisted_bumps_version_and_resets_changes():
    session = capacity(version=4)
    session.admit(1)

    session.mark_persisted()

    assert session.version == 5
    assert session.added_attendees == set()
