"""
Factory classes for generating test data using Factory Boy and Faker.
"""
import factory
from factory.django import DjangoModelFactory
from django.contrib.auth import get_user_model

from allocation.factory import ResourceFactory
from users.models import (
    Role, Permission, RolePermission, UserRoles,
    ADMIN_ROLE, MEMBER_ROLE, RESOURCE_MANAGER_ROLE,
)

User = get_user_model()


class RoleFactory(DjangoModelFactory):
    """Factory for creating Role instances."""

    class Meta:
        model = Role
        django_get_or_create = ('role_name',)

    role_name = factory.Sequence(lambda n: f"Role_{n}")
    description = factory.Faker('sentence', nb_words=6)


class PermissionFactory(DjangoModelFactory):
    """Factory for creating Permission instances."""

    class Meta:
        model = Permission
        django_get_or_create = ('permission_key',)

    permission_key = factory.Sequence(lambda n: f"permission.{n}")
    description = factory.Faker('sentence', nb_words=6)


class RolePermissionFactory(DjangoModelFactory):
    class Meta:
        model = RolePermission
        django_get_or_create = ('role', 'permission')

    role = factory.SubFactory(RoleFactory)
    permission = factory.SubFactory(PermissionFactory)


class UserFactory(DjangoModelFactory):
    """Account with no role and no linked resource."""

    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@example.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True
    is_staff = False

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        if not create:
            return
        self.set_password(extracted or 'defaultpass123')
        self.save()


class UserRolesFactory(DjangoModelFactory):
    class Meta:
        model = UserRoles

    user = factory.SubFactory(UserFactory)
    role = factory.SubFactory(RoleFactory)
    is_active = True


def _grant_role(user, role_name):
    role, _ = Role.objects.get_or_create(
        role_name=role_name,
        defaults={'description': f'{role_name} role'}
    )
    UserRoles.objects.create(user=user, role=role)


class AdminUserFactory(UserFactory):
    """Factory for creating admin users."""

    is_staff = True

    @factory.post_generation
    def roles(self, create, extracted, **kwargs):
        if create:
            _grant_role(self, ADMIN_ROLE)


class ResourceManagerUserFactory(UserFactory):
    @factory.post_generation
    def roles(self, create, extracted, **kwargs):
        if create:
            _grant_role(self, RESOURCE_MANAGER_ROLE)


class MemberUserFactory(UserFactory):
    """Member with its own Resource."""

    resource = factory.SubFactory(ResourceFactory)

    @factory.post_generation
    def roles(self, create, extracted, **kwargs):
        if create:
            _grant_role(self, MEMBER_ROLE)
