from django.apps import AppConfig  # type: ignore


class SessionsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.sessions'
    # django.contrib.sessions already owns the "sessions" label
    label = 'play_sessions'
    verbose_name = 'Sessions'
