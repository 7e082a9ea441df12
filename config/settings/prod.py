"""Production settings for the Courtside project.

Secrets come from the environment; the webhook secret and gateway key
are required so a misconfigured deployment fails at start-up instead
of accepting unsigned payment events.
"""

from .base import *  # noqa: F401,F403
from .base import get_env

DEBUG = False

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)

ALLOWED_HOSTS = [host.strip() for host in get_env('DJANGO_ALLOWED_HOSTS', '').split(',') if host.strip()]

PAYMENT_WEBHOOK_SECRET = get_env('PAYMENT_WEBHOOK_SECRET', required=True)
PAYMENT_GATEWAY_API_KEY = get_env('PAYMENT_GATEWAY_API_KEY', required=True)

CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
