"""
Celery configuration for the booking payments service.

Celery runs the periodic reconciliation jobs that back up Stripe webhooks:
- Polling payment intents that stayed in flight too long
- Refreshing connected accounts that are still onboarding
- Retrying webhook events that failed to apply

This configuration uses Redis as the message broker. The beat schedule
lives in settings (CELERY_BEAT_SCHEDULE) so it can be tuned per environment.
Tasks are auto-discovered from all installed Django apps.

Usage:
    # Worker and scheduler
    celery -A config worker -l info
    celery -A config beat -l info

    # Run a job by hand
    from payments.tasks import reconcile_pending_payment_intents
    reconcile_pending_payment_intents.delay()

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Picks up payments.tasks
app.autodiscover_tasks()
