from django.contrib import admin
from django import forms
from .models import User, Role, Permission, RolePermission, UserRoles


class UserRoleInline(admin.TabularInline):
    """Role history for a user; disabled rows stay for auditing."""
    model = UserRoles
    extra = 0
    fields = ['role', 'is_active', 'assigned_at', 'disabled_at']
    readonly_fields = ['assigned_at', 'disabled_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('role').order_by('-assigned_at')


class UserAdminForm(forms.ModelForm):
    """User form with a single role picker."""
    role = forms.ModelChoiceField(
        queryset=Role.objects.all().order_by('role_name'),
        required=False,
        help_text="Select a role for this user. If not specified, Member role will be assigned.",
        empty_label="-- Select Role (defaults to Member) --"
    )

    class Meta:
        model = User
        fields = '__all__'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance and self.instance.pk:
            current_role = self.instance.get_active_role()
            if current_role:
                self.fields['role'].initial = current_role


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin for User with role management and resource link."""
    form = UserAdminForm
    inlines = [UserRoleInline]
    list_display = ['username', 'email', 'first_name', 'last_name', 'resource', 'is_active', 'is_staff', 'get_roles']
    list_filter = ['is_active', 'is_staff', 'resource__department']
    search_fields = ['username', 'email', 'first_name', 'last_name', 'resource__name']
    ordering = ['username']
    readonly_fields = ['created_at', 'updated_at']
    list_select_related = ['resource']

    fieldsets = (
        ('Authentication', {
            'fields': ('username', 'password')
        }),
        ('Personal Information', {
            'fields': ('first_name', 'last_name', 'email')
        }),
        ('Time Logging', {
            'fields': ('resource',),
            'description': 'The resource whose time this user logs.'
        }),
        ('Role Assignment', {
            'fields': ('role',),
            'description': 'Select the primary role for this user. Role changes are audited.'
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff'),
        }),
        ('Important Dates', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    @admin.display(description='Active Roles')
    def get_roles(self, obj):
        names = [ur.role.role_name for ur in obj.userroles_set.filter(is_active=True).select_related('role')]
        return ', '.join(names) if names else 'No roles assigned'

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)

        selected_role = form.cleaned_data.get('role')
        if selected_role and selected_role != obj.get_active_role():
            obj.assign_role(selected_role.role_name)
            self.message_user(request, f"User {obj.username} assigned role: {selected_role.role_name}")
        elif not change and not selected_role:
            obj.assign_role('Member')
            self.message_user(request, f"User {obj.username} assigned default Member role")


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['role_name', 'description', 'get_permissions_count', 'get_users_count', 'created_at']
    search_fields = ['role_name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['role_name']

    @admin.display(description='Permissions')
    def get_permissions_count(self, obj):
        return obj.rolepermission_set.count()

    @admin.display(description='Users')
    def get_users_count(self, obj):
        return obj.userroles_set.filter(is_active=True).count()


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    list_display = ['permission_key', 'description', 'get_roles_count', 'created_at']
    search_fields = ['permission_key', 'description']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['permission_key']

    @admin.display(description='Roles')
    def get_roles_count(self, obj):
        return obj.rolepermission_set.count()


@admin.register(RolePermission)
class RolePermissionAdmin(admin.ModelAdmin):
    list_display = ['role', 'permission']
    list_filter = ['role']
    search_fields = ['role__role_name', 'permission__permission_key']
    ordering = ['role__role_name', 'permission__permission_key']


@admin.register(UserRoles)
class UserRolesAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'assigned_at', 'is_active', 'disabled_at']
    list_filter = ['role', 'is_active', 'assigned_at']
    search_fields = ['user__username', 'user__email', 'role__role_name']
    readonly_fields = ['assigned_at', 'disabled_at']
    ordering = ['-assigned_at']
