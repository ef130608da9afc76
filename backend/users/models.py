# backend/users/models.py
import logging

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.db import models, transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

ADMIN_ROLE = "Admin"
RESOURCE_MANAGER_ROLE = "Resource Manager"
MEMBER_ROLE = "Member"
ESSENTIAL_ROLES = (ADMIN_ROLE, RESOURCE_MANAGER_ROLE, MEMBER_ROLE)


class UserManager(BaseUserManager):
    """User manager for username-based authentication with a single active role."""

    def create_user(self, username, password=None, role_name=None, **extra_fields):
        if not username:
            raise ValueError("The username field must be set")

        extra_fields.setdefault('is_active', True)

        if not role_name:
            role_name = MEMBER_ROLE
            logger.info("No role specified for user %s, assigning default role: %s", username, role_name)

        with transaction.atomic():
            user = self.model(username=username, **extra_fields)
            if password:
                user.set_password(password)
            else:
                user.set_unusable_password()
            user.save()
            self._assign_role_to_user(user, role_name)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_active', True)
        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        return self.create_user(username, password, role_name=ADMIN_ROLE, **extra_fields)

    def _assign_role_to_user(self, user, role_name):
        Role = self.model._meta.apps.get_model('users', 'Role')
        UserRoles = self.model._meta.apps.get_model('users', 'UserRoles')

        try:
            role = Role.objects.get(role_name=role_name)
        except Role.DoesNotExist:
            if role_name not in ESSENTIAL_ROLES:
                raise ValueError(f"Role '{role_name}' does not exist and is not an essential role")
            role, _ = Role.objects.get_or_create(
                role_name=role_name,
                defaults={'description': f'{role_name} role'}
            )

        with transaction.atomic():
            for user_role in UserRoles.objects.filter(user=user, is_active=True):
                user_role.disable()
            UserRoles.objects.create(user=user, role=role, is_active=True)
        logger.info("Assigned role %s to user %s", role_name, user.username)


class User(AbstractBaseUser):
    """
    Login account. `resource` is the planning Resource whose time this
    user logs; admins may have none.
    """
    username    = models.CharField(max_length=150, unique=True, null=False, blank=False)
    email       = models.EmailField(unique=False, null=True, blank=True)
    first_name  = models.CharField(max_length=150, blank=True)
    last_name   = models.CharField(max_length=150, blank=True)
    resource    = models.ForeignKey(
        "allocation.Resource",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
    )
    is_active   = models.BooleanField(default=True)
    is_staff    = models.BooleanField(default=False)
    created_at  = models.DateTimeField(default=timezone.now)
    updated_at  = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD  = 'username'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    def __str__(self):
        return self.username

    def get_full_name(self):
        full_name = f'{self.first_name} {self.last_name}'.strip()
        return full_name or self.username

    def get_short_name(self):
        return self.first_name or self.username

    # Django admin compatibility without PermissionsMixin
    def has_perm(self, perm, obj=None):
        return self.is_staff

    def has_module_perms(self, app_label):
        return self.is_staff

    def has_custom_permission(self, permission_key):
        """Check if user has a specific custom permission through an active role."""
        return Permission.objects.filter(
            permission_key=permission_key,
            rolepermission__role__userroles__user=self,
            rolepermission__role__userroles__is_active=True,
        ).exists()

    def get_user_roles(self):
        return Role.objects.filter(userroles__user=self, userroles__is_active=True)

    def get_active_role(self):
        ur = (UserRoles.objects
              .filter(user=self, is_active=True)
              .select_related('role')
              .first())
        return ur.role if ur else None

    def get_active_role_name(self):
        role = self.get_active_role()
        return role.role_name if role else None

    def get_user_permissions(self):
        return Permission.objects.filter(
            rolepermission__role__userroles__user=self,
            rolepermission__role__userroles__is_active=True,
        ).distinct()

    def assign_role(self, role_name):
        """Assign a role to this user (single active role only)."""
        User.objects._assign_role_to_user(self, role_name)

    def remove_role(self, role_name):
        """
        Disable the given active role. Falls back to Member when no active
        role remains. Returns False if the user did not hold the role.
        """
        try:
            with transaction.atomic():
                user_role = UserRoles.objects.get(user=self, role__role_name=role_name, is_active=True)
                user_role.disable()

                if not UserRoles.objects.filter(user=self, is_active=True).exists():
                    member_role, _ = Role.objects.get_or_create(
                        role_name=MEMBER_ROLE,
                        defaults={'description': 'Member role'}
                    )
                    UserRoles.objects.create(user=self, role=member_role, is_active=True)
            return True
        except UserRoles.DoesNotExist:
            return False

    def has_role(self, role_name):
        return UserRoles.objects.filter(
            user=self,
            role__role_name=role_name,
            is_active=True
        ).exists()


class Role(models.Model):
    """Role model for custom permission system."""
    role_name = models.CharField(max_length=100, unique=True, null=False)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self):
        return self.role_name


class Permission(models.Model):
    """Permission model for custom permission system."""
    permission_key = models.CharField(max_length=200, unique=True, null=False)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Permission'
        verbose_name_plural = 'Permissions'

    def __str__(self):
        return self.permission_key


class RolePermission(models.Model):
    """Many-to-many relationship between roles and permissions."""
    role = models.ForeignKey(Role, on_delete=models.CASCADE)
    permission = models.ForeignKey(Permission, on_delete=models.CASCADE)

    class Meta:
        unique_together = ('role', 'permission')
        verbose_name = 'Role Permission'
        verbose_name_plural = 'Role Permissions'

    def __str__(self):
        return f"{self.role.role_name} - {self.permission.permission_key}"


class UserRoles(models.Model):
    """User to role assignments; disabled rows are kept for auditing."""
    user = models.ForeignKey(User, on_delete=models.CASCADE)
    role = models.ForeignKey(Role, on_delete=models.CASCADE)
    assigned_at = models.DateTimeField(default=timezone.now)
    is_active = models.BooleanField(default=True)
    disabled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'User Role'
        verbose_name_plural = 'User Roles'

    def __str__(self):
        status = "Active" if self.is_active else "Disabled"
        return f"{self.user.username} - {self.role.role_name} ({status})"

    def disable(self):
        self.is_active = False
        self.disabled_at = timezone.now()
        self.save()
