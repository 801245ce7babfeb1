"""
Celery application for dairy_backend.

Periodic jobs (the nightly stock archive) are declared in
``settings.CELERY_BEAT_SCHEDULE``.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'dairy_backend.settings')

app = Celery('dairy_backend')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
