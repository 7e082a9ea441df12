"""Fixtures shared by the session, booking, payment and waitlist tests."""

from __future__ import annotations

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import F
from django.utils import timezone

from apps.bookings.models import Booking
from apps.sessions.models import Session, SessionAttendee

User = get_user_model()


def make_user(username: str = "player", **extra):
    return User.objects.create_user(
        username=username, email=f"{username}@example.com", password="pass", **extra
    )


def make_session(**overrides) -> Session:
    fields = {
        "title": "Sunday Pickup",
        "location": "Court 3",
        "starts_at": timezone.now() + timedelta(days=3),
        "max_attendees": 2,
        "price_cents": 2000,
        "venue_cut_percent": 20,
        "coach_cut_percent": 80,
    }
    fields.update(overrides)
    return Session.objects.create(**fields)


def seat(session: Session, *users) -> Session:
    """Put ``users`` on the roster and keep the counter in step."""
    for user in users:
        SessionAttendee.objects.create(session=session, user=user)
    Session.objects.filter(pk=session.pk).update(current_attendees=F("current_attendees") + len(users))
    session.refresh_from_db()
    return session


def make_booking(session, user, **overrides) -> Booking:
    fields = {
        "session": session,
        "user": user,
        "price_cents": session.price_cents if session else 2000,
    }
    fields.update(overrides)
    return Booking.objects.create(**fields)


def paid_booking(session, user, payment_intent_id: str = "pi_paid") -> Booking:
    """A confirmed, paid booking with the user seated."""
    seat(session, user)
    return make_booking(
        session,
        user,
        status=Booking.Status.CONFIRMED,
        payment_status=Booking.PaymentStatus.PAID,
        payment_intent_id=payment_intent_id,
        confirmed_at=timezone.now(),
    )
