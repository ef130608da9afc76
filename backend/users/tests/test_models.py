"""
Test models for the users app.
"""
from django.test import TestCase

from allocation.factory import ResourceFactory
from users.factory import (
    AdminUserFactory, MemberUserFactory, PermissionFactory,
    RoleFactory, RolePermissionFactory, UserFactory,
)
from users.models import (
    User, Role, UserRoles, ADMIN_ROLE, MEMBER_ROLE, RESOURCE_MANAGER_ROLE,
)


class UserManagerTestCase(TestCase):

    def test_create_user_defaults_to_member_role(self):
        user = User.objects.create_user('alice', 'testpass123')
        self.assertTrue(user.check_password('testpass123'))
        self.assertTrue(user.is_active)
        self.assertEqual(user.get_active_role_name(), MEMBER_ROLE)

    def test_create_user_without_password_is_unusable(self):
        user = User.objects.create_user('bob')
        self.assertFalse(user.has_usable_password())

    def test_create_user_requires_username(self):
        with self.assertRaises(ValueError):
            User.objects.create_user('', 'testpass123')

    def test_create_user_with_unknown_role(self):
        with self.assertRaises(ValueError):
            User.objects.create_user('carol', 'testpass123', role_name='Auditor')
        self.assertFalse(User.objects.filter(username='carol').exists())

    def test_create_user_with_essential_role_creates_it(self):
        user = User.objects.create_user('dave', 'pw', role_name=RESOURCE_MANAGER_ROLE)
        self.assertTrue(Role.objects.filter(role_name=RESOURCE_MANAGER_ROLE).exists())
        self.assertEqual(user.get_active_role_name(), RESOURCE_MANAGER_ROLE)

    def test_create_superuser(self):
        user = User.objects.create_superuser('root', 'pw')
        self.assertTrue(user.is_staff)
        self.assertEqual(user.get_active_role_name(), ADMIN_ROLE)

    def test_create_superuser_must_be_staff(self):
        with self.assertRaises(ValueError):
            User.objects.create_superuser('root', 'pw', is_staff=False)


class UserRoleTestCase(TestCase):

    def setUp(self):
        self.user = MemberUserFactory()

    def test_member_factory_links_resource(self):
        self.assertIsNotNone(self.user.resource_id)
        self.assertEqual(self.user.resource.users.get(), self.user)

    def test_assign_role_keeps_single_active_role(self):
        self.user.assign_role(ADMIN_ROLE)
        self.assertEqual(self.user.get_active_role_name(), ADMIN_ROLE)
        self.assertEqual(UserRoles.objects.filter(user=self.user, is_active=True).count(), 1)
        disabled = UserRoles.objects.get(user=self.user, is_active=False)
        self.assertEqual(disabled.role.role_name, MEMBER_ROLE)
        self.assertIsNotNone(disabled.disabled_at)

    def test_remove_role_falls_back_to_member(self):
        self.user.assign_role(RESOURCE_MANAGER_ROLE)
        self.assertTrue(self.user.remove_role(RESOURCE_MANAGER_ROLE))
        self.assertEqual(self.user.get_active_role_name(), MEMBER_ROLE)

    def test_remove_role_not_held(self):
        self.assertFalse(self.user.remove_role(ADMIN_ROLE))

    def test_has_role(self):
        self.assertTrue(self.user.has_role(MEMBER_ROLE))
        self.assertFalse(self.user.has_role(ADMIN_ROLE))

    def test_custom_permission_through_active_role(self):
        role = RoleFactory(role_name=MEMBER_ROLE)
        permission = PermissionFactory(permission_key='time_entries.log')
        RolePermissionFactory(role=role, permission=permission)

        self.assertTrue(self.user.has_custom_permission('time_entries.log'))
        self.assertFalse(self.user.has_custom_permission('time_logging.admin'))
        self.assertEqual(list(self.user.get_user_permissions()), [permission])

        self.user.assign_role(ADMIN_ROLE)
        self.assertFalse(self.user.has_custom_permission('time_entries.log'))


class UserModelTestCase(TestCase):

    def test_full_name_falls_back_to_username(self):
        user = UserFactory(first_name='', last_name='')
        self.assertEqual(user.get_full_name(), user.username)
        self.assertEqual(user.get_short_name(), user.username)

    def test_admin_site_access_follows_staff_flag(self):
        self.assertTrue(AdminUserFactory().has_module_perms('users'))
        self.assertFalse(UserFactory().has_perm('users.view_user'))

    def test_resource_unlinked_on_delete(self):
        resource = ResourceFactory()
        user = UserFactory(resource=resource)
        resource.delete()
        user.refresh_from_db()
        self.assertIsNone(user.resource)
