"""ASGI entry point for the Courtside project.

Production servers set DJANGO_SETTINGS_MODULE explicitly; the default
points at the development settings.
"""

import os
from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
