#allocation/serializers.py
from rest_framework import serializers
from .models import Project, Resource, ResourceAllocation


class ProjectSerializer(serializers.ModelSerializer):
    startDate = serializers.DateField(source="start_date", allow_null=True, required=False)
    endDate = serializers.DateField(source="end_date", allow_null=True, required=False)

    class Meta:
        model = Project
        fields = ["id", "name", "description", "status", "startDate", "endDate"]


class ResourceSerializer(serializers.ModelSerializer):
    weeklyCapacity = serializers.DecimalField(source="weekly_capacity", max_digits=5, decimal_places=2)
    isActive = serializers.BooleanField(source="is_active")

    class Meta:
        model = Resource
        fields = ["id", "name", "email", "role", "department", "weeklyCapacity", "isActive"]


class ResourceAllocationSerializer(serializers.ModelSerializer):
    projectId = serializers.IntegerField(source="project_id", read_only=True)
    resourceId = serializers.IntegerField(source="resource_id", read_only=True)
    allocatedHours = serializers.DecimalField(source="allocated_hours", max_digits=5, decimal_places=2)
    startDate = serializers.DateField(source="start_date")
    endDate = serializers.DateField(source="end_date", allow_null=True)
    project = ProjectSerializer(read_only=True)

    class Meta:
        model = ResourceAllocation
        fields = [
            "id", "projectId", "resourceId", "allocatedHours",
            "startDate", "endDate", "role", "status", "project",
        ]
