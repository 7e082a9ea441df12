"""
Booking persistence.

Translates between the ``Booking`` ORM row and the domain aggregate.
Saves are conditional on the status pair read with the aggregate, so
two handlers racing on the same booking cannot both apply a transition.
"""

from typing import Optional
from uuid import UUID

from django.utils import timezone  # type: ignore

from shared.application.uow import StaleSnapshotError
from apps.bookings.domain.entities import Booking, BookingStatus, PaymentStatus
from apps.bookings.models import Booking as BookingModel


class DjangoBookingRepository:

    def get(self, booking_id: UUID) -> Optional[Booking]:
        row = BookingModel.objects.filter(pk=booking_id).first()
        return self._to_domain(row) if row else None

    def get_by_payment_intent(self, payment_intent_id: str) -> Optional[Booking]:
        if not payment_intent_id:
            return None
        row = BookingModel.objects.filter(payment_intent_id=payment_intent_id).order_by('-created_at').first()
        return self._to_domain(row) if row else None

    def get_confirmed(self, session_id: UUID, user_id: int) -> Optional[Booking]:
        row = (
            BookingModel.objects
            .filter(session_id=session_id, user_id=user_id, status=BookingModel.Status.CONFIRMED)
            .order_by('-confirmed_at')
            .first()
        )
        return self._to_domain(row) if row else None

    def add(self, booking: Booking, **extra) -> BookingModel:
        """Insert a new booking; ``extra`` carries presentation-only columns such as the split."""
        row = BookingModel.objects.create(
            id=booking.id,
            session_id=booking.session_id,
            user_id=booking.user_id,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            payment_intent_id=booking.payment_intent_id,
            price_cents=booking.price_cents,
            currency=booking.currency,
            **extra,
        )
        booking.mark_persisted()
        return row

    def save(self, booking: Booking):
        """
        Write the aggregate back if the row still has the statuses it was read with.

        Raises:
            StaleSnapshotError: a concurrent handler changed the booking first
        """
        updated = BookingModel.objects.filter(
            pk=booking.id,
            status=booking.loaded_status.value,
            payment_status=booking.loaded_payment_status.value,
        ).update(
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            payment_intent_id=booking.payment_intent_id,
            confirmed_at=booking.confirmed_at,
            cancelled_at=booking.cancelled_at,
            updated_at=timezone.now(),
        )
        if not updated:
            raise StaleSnapshotError(
                'Booking', booking.id, f"{booking.loaded_status.value}/{booking.loaded_payment_status.value}"
            )
        booking.mark_persisted()

    @staticmethod
    def _to_domain(row: BookingModel) -> Booking:
        return Booking(
            id=row.pk,
            session_id=row.session_id,
            user_id=row.user_id,
            price_cents=row.price_cents,
            currency=row.currency,
            status=BookingStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            payment_intent_id=row.payment_intent_id,
            confirmed_at=row.confirmed_at,
            cancelled_at=row.cancelled_at,
        )
