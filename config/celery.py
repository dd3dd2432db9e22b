"""
Celery configuration for the retail POS platform.
"""

import os

from celery import Celery

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.development")

app = Celery("retail_pos")

# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Celery Beat Schedule for periodic tasks
app.conf.beat_schedule = {
    # Hand back stock held by abandoned checkouts
    "release-expired-reservations": {
        "task": "apps.sales.tasks.release_expired_reservations",
        "schedule": 60.0,  # Every minute
        "options": {"queue": "sales", "priority": 9},
    },
}

app.conf.task_routes = {
    "apps.sales.tasks.*": {"queue": "sales", "priority": 9},
}
