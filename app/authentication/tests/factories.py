"""
Factory Boy factories for authentication models.

Usage:
    from authentication.tests.factories import ProviderFactory, SeekerFactory

    seeker = SeekerFactory()
    provider = ProviderFactory(name="Asha")
"""

import factory

from authentication.models import User, UserRole


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Creates active seekers by default.

    Examples:
        user = UserFactory()
        admin = UserFactory(role=UserRole.ADMIN, is_staff=True)
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Faker("name")
    role = UserRole.SEEKER
    is_active = True
    is_staff = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )


class SeekerFactory(UserFactory):
    email = factory.Sequence(lambda n: f"seeker{n}@example.com")
    role = UserRole.SEEKER


class ProviderFactory(UserFactory):
    email = factory.Sequence(lambda n: f"provider{n}@example.com")
    role = UserRole.PROVIDER
