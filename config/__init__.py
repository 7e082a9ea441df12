"""Django project configuration for Courtside.

Importing the Celery application here makes ``shared_task`` functions
bind to it as soon as Django starts.
"""

from .celery import app as celery_app  # noqa: F401
