from django.apps import AppConfig  # type: ignore


class WaitlistConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.waitlist'
    verbose_name = 'Waitlist'

    def ready(self):
        from shared.application.message_bus import message_bus
        from apps.sessions.domain.events import SeatReleased
        from apps.waitlist.application.promoter import promote_on_seat_released

        message_bus.register_event_handler(SeatReleased, promote_on_seat_released)
