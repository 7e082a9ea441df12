from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.bookings.models import Booking


class Command(BaseCommand):
    help = 'Lists paid bookings whose charge still has to be refunded at the gateway'

    def add_arguments(self, parser):
        parser.add_argument('--limit', type=int, default=100)
        parser.add_argument(
            '--stalled-after-hours',
            type=int,
            default=settings.REFUND_STALLED_AFTER_HOURS,
            help='Age after which a requested refund counts as stalled',
        )

    def handle(self, *args, **options):
        overbooked = Booking.objects.awaiting_refund()
        stalled = Booking.objects.stalled_refunds(timedelta(hours=options['stalled_after_hours']))

        self._list("bookings awaiting refund", overbooked, options['limit'])
        self._list("cancelled bookings with a stalled refund", stalled, options['limit'])

    def _list(self, label, bookings, limit):
        bookings = bookings.select_related('session').order_by('created_at')
        total = bookings.count()

        self.stdout.write(f"{total} {label}")

        for booking in bookings[:limit]:
            self.stdout.write(
                f"{booking.booking_code}\t{booking.payment_intent_id or '-'}\t"
                f"{booking.price_cents} {booking.currency}\t{booking.session or 'session deleted'}"
            )

        if total > limit:
            self.stdout.write(self.style.WARNING(f"... {total - limit} more"))
