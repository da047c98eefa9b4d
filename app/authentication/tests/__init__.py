"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User manager and role permission tests

Usage:
    pytest authentication/tests/
"""
