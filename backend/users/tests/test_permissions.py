"""
Test capability helpers and DRF permission classes.
"""
from types import SimpleNamespace

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from users.factory import (
    AdminUserFactory, MemberUserFactory, PermissionFactory, ResourceManagerUserFactory,
    RoleFactory, RolePermissionFactory, UserFactory,
)
from users.permissions import (
    TIME_LOGGING_ADMIN, CanAccessResource, IsTimeLoggingAdmin,
    can_access_resource, has_admin_capability, has_resource_management,
)


class CapabilityTestCase(TestCase):

    def test_admin_role_without_staff_is_admin(self):
        user = AdminUserFactory(is_staff=False)
        self.assertTrue(has_admin_capability(user))
        self.assertFalse(has_resource_management(user))

    def test_staff_is_admin(self):
        self.assertTrue(has_admin_capability(UserFactory(is_staff=True)))

    def test_admin_permission_grants_capability(self):
        user = MemberUserFactory()
        role = RoleFactory(role_name='Member')
        RolePermissionFactory(role=role, permission=PermissionFactory(permission_key=TIME_LOGGING_ADMIN))
        self.assertTrue(has_admin_capability(user))

    def test_resource_manager(self):
        user = ResourceManagerUserFactory()
        self.assertFalse(has_admin_capability(user))
        self.assertTrue(has_resource_management(user))

    def test_anonymous(self):
        self.assertFalse(has_admin_capability(AnonymousUser()))
        self.assertFalse(can_access_resource(AnonymousUser(), 1))

    def test_member_accesses_only_own_resource(self):
        user = MemberUserFactory()
        self.assertTrue(can_access_resource(user, user.resource_id))
        self.assertFalse(can_access_resource(user, user.resource_id + 1))

    def test_manager_accesses_any_resource(self):
        self.assertTrue(can_access_resource(ResourceManagerUserFactory(), 999))

    def test_user_without_resource_owns_nothing(self):
        user = UserFactory()
        self.assertFalse(can_access_resource(user, None))
        self.assertFalse(can_access_resource(user, 1))


class PermissionClassTestCase(TestCase):

    def setUp(self):
        self.factory = APIRequestFactory()

    def _request(self, user):
        request = self.factory.get('/')
        request.user = user
        return request

    def test_can_access_resource_uses_url_kwarg(self):
        user = MemberUserFactory()
        permission = CanAccessResource()
        own = SimpleNamespace(kwargs={'resource_id': str(user.resource_id)})
        other = SimpleNamespace(kwargs={'resource_id': str(user.resource_id + 1)})
        self.assertTrue(permission.has_permission(self._request(user), own))
        self.assertFalse(permission.has_permission(self._request(user), other))

    def test_can_access_resource_object_check(self):
        user = MemberUserFactory()
        permission = CanAccessResource()
        view = SimpleNamespace(kwargs={})
        self.assertTrue(permission.has_permission(self._request(user), view))
        self.assertTrue(permission.has_object_permission(
            self._request(user), view, SimpleNamespace(resource_id=user.resource_id)))
        self.assertFalse(permission.has_object_permission(
            self._request(user), view, SimpleNamespace(resource_id=user.resource_id + 1)))
        self.assertFalse(permission.has_object_permission(
            self._request(UserFactory()), view, SimpleNamespace(resource_id=None)))

    def test_is_time_logging_admin(self):
        view = SimpleNamespace(kwargs={})
        self.assertTrue(IsTimeLoggingAdmin().has_permission(self._request(AdminUserFactory()), view))
        self.assertFalse(IsTimeLoggingAdmin().has_permission(self._request(MemberUserFactory()), view))
