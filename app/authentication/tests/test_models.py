"""
Tests for the User model, its manager and the role permissions.
"""

import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIRequestFactory

from authentication.models import User, UserRole
from authentication.permissions import IsProvider, IsSeeker
from authentication.tests.factories import ProviderFactory, SeekerFactory


@pytest.mark.django_db
class TestUserManager:
    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email="Asha@EXAMPLE.com", password="pass12345")

        assert user.email == "Asha@example.com"
        assert user.check_password("pass12345")
        assert user.role == UserRole.SEEKER
        assert not user.is_staff

    def test_create_user_without_password_is_unusable(self):
        user = User.objects.create_user(email="nopass@example.com")

        assert not user.has_usable_password()

    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email="")

    def test_create_superuser(self):
        admin = User.objects.create_superuser(email="admin@example.com", password="pass12345")

        assert admin.is_staff and admin.is_superuser
        assert admin.role == UserRole.ADMIN

    def test_names(self):
        user = SeekerFactory(name="Asha Rao")

        assert user.get_full_name() == "Asha Rao"
        assert user.get_short_name() == "Asha"


@pytest.mark.django_db
class TestRolePermissions:
    def request_for(self, user):
        request = APIRequestFactory().get("/")
        request.user = user
        return request

    def test_seeker(self):
        request = self.request_for(SeekerFactory())

        assert IsSeeker().has_permission(request, None)
        assert not IsProvider().has_permission(request, None)

    def test_provider(self):
        request = self.request_for(ProviderFactory())

        assert IsProvider().has_permission(request, None)
        assert not IsSeeker().has_permission(request, None)

    def test_anonymous(self):
        request = self.request_for(AnonymousUser())

        assert not IsSeeker().has_permission(request, None)
        assert not IsProvider().has_permission(request, None)
