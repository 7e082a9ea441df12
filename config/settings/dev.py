"""Development settings for the Courtside project.

Debug on, every host allowed, and the payment gateway client answers
with simulated responses. Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
