"""
Test admin for the users app.
"""
from django.contrib.admin.sites import AdminSite
from django.contrib.messages.storage.fallback import FallbackStorage
from django.test import RequestFactory, TestCase

from users.admin import UserAdmin, UserAdminForm
from users.factory import AdminUserFactory, MemberUserFactory
from users.models import Role, User


class UserAdminTestCase(TestCase):

    def setUp(self):
        self.site = AdminSite()
        self.user_admin = UserAdmin(User, self.site)
        self.request = RequestFactory().post('/admin/users/user/add/')
        self.request.user = AdminUserFactory()
        self.request.session = {}
        self.request._messages = FallbackStorage(self.request)

    def test_configuration(self):
        self.assertIn('username', self.user_admin.list_display)
        self.assertIn('resource', self.user_admin.list_display)
        self.assertIn('username', self.user_admin.search_fields)

    def test_get_roles(self):
        user = MemberUserFactory()
        self.assertEqual(self.user_admin.get_roles(user), 'Member')

    def test_new_user_defaults_to_member(self):
        user = User(username='newbie')
        form = UserAdminForm(data={})
        form.cleaned_data = {'role': None}
        self.user_admin.save_model(self.request, user, form, change=False)
        self.assertEqual(user.get_active_role_name(), 'Member')

    def test_role_change_is_applied(self):
        user = MemberUserFactory()
        role, _ = Role.objects.get_or_create(role_name='Resource Manager')
        form = UserAdminForm(instance=user)
        form.cleaned_data = {'role': role}
        self.user_admin.save_model(self.request, user, form, change=True)
        self.assertEqual(user.get_active_role_name(), 'Resource Manager')
