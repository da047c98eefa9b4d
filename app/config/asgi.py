"""
ASGI config for the booking payments service.

Uvicorn uses this entry point to serve the Django application. The service
is plain HTTP (REST API plus the Stripe webhook), so the ASGI callable is
Django's own.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

# Set the default Django settings module for the ASGI application
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_asgi_application()
