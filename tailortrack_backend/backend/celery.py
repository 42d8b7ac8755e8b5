# backend/celery.py
"""
CELERY APPLICATION

Workers run with:
    celery -A backend worker -l info

Configuration is read from Django settings under the CELERY_ prefix;
tasks are discovered from each installed app's tasks.py.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

app = Celery("tailortrack")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
