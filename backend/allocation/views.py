# allocation/views.py
from django.shortcuts import get_object_or_404
from rest_framework import generics
from rest_framework.exceptions import ValidationError
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .models import AllocationStatus, Resource, ResourceAllocation
from .serializers import ResourceAllocationSerializer, ResourceSerializer
from users.permissions import CanAccessResource, IsResourceManager


class ResourceListView(generics.ListAPIView):
    """
    Active resources, optionally filtered by ?department=.
    """
    serializer_class = ResourceSerializer
    permission_classes = [IsResourceManager]

    def get_queryset(self):
        qs = Resource.objects.filter(is_active=True)
        department = self.request.query_params.get("department")
        if department:
            qs = qs.filter(department=department)
        return qs


class ResourceAllocationListView(generics.ListAPIView):
    """
    GET /api/resources/<id>/allocations[?status=active]
    Allocations of one resource with their project nested.
    """
    serializer_class = ResourceAllocationSerializer
    permission_classes = [CanAccessResource]
    pagination_class = None

    @extend_schema(parameters=[
        OpenApiParameter("status", str, description="active | planned | completed"),
    ])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        resource = get_object_or_404(Resource, pk=self.kwargs["resource_id"])
        qs = ResourceAllocation.objects.filter(resource=resource).select_related("project")

        status_filter = self.request.query_params.get("status")
        if status_filter:
            if status_filter not in AllocationStatus.values:
                raise ValidationError({"status": f"Unknown allocation status '{status_filter}'"})
            qs = qs.filter(status=status_filter)
        return qs
