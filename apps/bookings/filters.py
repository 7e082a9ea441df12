"""Query filters for the booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    payment_status = django_filters.ChoiceFilter(choices=Booking.PaymentStatus.choices)
    session = django_filters.UUIDFilter(field_name="session_id")

    class Meta:
        model = Booking
        fields = ["status", "payment_status", "session"]
