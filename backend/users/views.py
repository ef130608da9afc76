# backend/users/views.py
import logging

from django.contrib.auth import authenticate
from rest_framework import status, generics
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema, OpenApiExample

from .models import Role
from .permissions import IsAdminRole, has_admin_capability, has_resource_management
from .serializers import LoginSerializer, PermissionSerializer, RoleSerializer, UserSerializer

logger = logging.getLogger(__name__)


class LoginView(generics.CreateAPIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = LoginSerializer

    @extend_schema(
        request=LoginSerializer,
        responses={200: dict},
        examples=[OpenApiExample('Login', value={'username': 'admin', 'password': 'abcabc'})],
    )
    def create(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = authenticate(
            request,
            username=s.validated_data["username"],
            password=s.validated_data["password"],
        )
        if not user:
            logger.warning("Failed login for %s", s.validated_data["username"])
            return Response({"error": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)

        refresh = RefreshToken.for_user(user)
        return Response({
            "user": UserSerializer(user).data,
            "tokens": {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            },
        }, status=status.HTTP_200_OK)


class MeView(APIView):
    """Current user with role, permissions and time-logging capabilities."""
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict}, operation_id="accounts_me")
    def get(self, request):
        user = request.user
        return Response({
            "user": UserSerializer(user).data,
            "roles": [{"id": r.id, "name": r.role_name} for r in user.get_user_roles()],
            "permissions": PermissionSerializer(user.get_user_permissions(), many=True).data,
            "capabilities": {
                "isAdmin": has_admin_capability(user),
                "canManageResources": has_resource_management(user),
            },
        })


@api_view(["GET"])
@permission_classes([IsAdminRole])
def roles_list(request):
    roles = Role.objects.all().order_by("role_name")
    return Response(RoleSerializer(roles, many=True).data)
