"""
Authentication app.

Owns the custom User model. Session/token issuance is handled by
djangorestframework-simplejwt; this app only answers "who is this user and
which role do they act in" for the booking and payment apps.
"""
