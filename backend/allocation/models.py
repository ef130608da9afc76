#allocation/models.py
from decimal import Decimal

from django.db import models
from django.utils import timezone


class ProjectStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    ACTIVE = "active", "Active"
    CLOSURE = "closure", "Closure"
    REJECTED = "rejected", "Rejected"


class AllocationStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    PLANNED = "planned", "Planned"
    COMPLETED = "completed", "Completed"


class Project(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=ProjectStatus.choices, default=ProjectStatus.ACTIVE)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Resource(models.Model):
    """
    A person whose time is planned and logged. Login accounts point at a
    resource through `users.User.resource`.
    """
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=100, blank=True)
    department = models.CharField(max_length=100, blank=True)
    weekly_capacity = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("40.00"))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} <{self.email}>"


class ResourceAllocation(models.Model):
    """
    Links a resource to a project with a planned weekly number of hours.
    """
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="allocations")
    resource = models.ForeignKey(Resource, on_delete=models.CASCADE, related_name="allocations")
    allocated_hours = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    role = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=AllocationStatus.choices, default=AllocationStatus.ACTIVE)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["project__name", "id"]

    def __str__(self):
        return f"{self.resource.name} → {self.project.name} ({self.allocated_hours}h)"
