"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
App-specific fixtures are defined in each app's tests/conftest.py.

Environment defaults are set before Django reads its settings, so the suite
runs against SQLite with dummy Stripe credentials unless the caller exports
real values (e.g. DATABASE_URL pointing at PostgreSQL).
"""

import os

import django

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite:///test_db.sqlite3")
os.environ.setdefault("SECURE_SSL_REDIRECT", "False")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_dummy")
os.environ.setdefault("LOG_LEVEL", "WARNING")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()
