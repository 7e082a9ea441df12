from django.apps import AppConfig  # type: ignore


class PaymentsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.payments'
    verbose_name = 'Payments'

    def ready(self):
        from shared.application.message_bus import message_bus
        from apps.payments.handlers import register_handlers

        register_handlers(message_bus)
