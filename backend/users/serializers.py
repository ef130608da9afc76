#backend/users/serializers.py
from rest_framework import serializers
from .models import User, Role, Permission


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model (read)."""
    full_name = serializers.SerializerMethodField()
    role_name = serializers.SerializerMethodField()
    resource_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = User
        fields = [
            'id',
            'username', 'email',
            'first_name', 'last_name', 'full_name', 'role_name',
            'resource_id', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.get_full_name()

    def get_role_name(self, obj):
        return obj.get_active_role_name()


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(help_text="User's username")
    password = serializers.CharField(write_only=True, help_text="User's password")


class RoleSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='role_name', read_only=True)

    class Meta:
        model = Role
        fields = ['id', 'role_name', 'name', 'description', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class PermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Permission
        fields = ['id', 'permission_key', 'description']
        read_only_fields = fields
