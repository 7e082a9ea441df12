from django.apps import AppConfig  # type: ignore


class BookingsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.bookings'
    verbose_name = 'Bookings'

    def ready(self):
        from shared.application.message_bus import message_bus
        from apps.bookings.application.command_handlers import (
            ConfirmBookingPaymentCommand,
            ConfirmBookingPaymentHandler,
            FailBookingPaymentCommand,
            FailBookingPaymentHandler,
            RefundBookingPaymentCommand,
            RefundBookingPaymentHandler,
        )

        handlers = {
            ConfirmBookingPaymentCommand: ConfirmBookingPaymentHandler,
            FailBookingPaymentCommand: FailBookingPaymentHandler,
            RefundBookingPaymentCommand: RefundBookingPaymentHandler,
        }
        for command_type, handler_class in handlers.items():
            if not message_bus.has_command_handler(command_type):
                # Handlers are built per command so each one sees current settings.
                message_bus.register_command_handler(
                    command_type, lambda command, cls=handler_class: cls().handle(command)
                )
