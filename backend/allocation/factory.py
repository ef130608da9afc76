"""
Factory classes for projects, resources and allocations.
"""
import datetime
from decimal import Decimal

import factory
from factory.django import DjangoModelFactory

from .models import AllocationStatus, Project, ProjectStatus, Resource, ResourceAllocation


class ProjectFactory(DjangoModelFactory):
    class Meta:
        model = Project

    name = factory.Sequence(lambda n: f"Project {n}")
    description = factory.Faker('sentence', nb_words=8)
    status = ProjectStatus.ACTIVE
    start_date = datetime.date(2025, 1, 6)


class ResourceFactory(DjangoModelFactory):
    """Factory for creating Resource instances."""

    class Meta:
        model = Resource

    name = factory.Faker('name')
    email = factory.Sequence(lambda n: f"resource{n}@example.com")
    role = "Developer"
    department = "Engineering"
    weekly_capacity = Decimal("40.00")
    is_active = True


class ResourceAllocationFactory(DjangoModelFactory):
    class Meta:
        model = ResourceAllocation

    project = factory.SubFactory(ProjectFactory)
    resource = factory.SubFactory(ResourceFactory)
    allocated_hours = Decimal("20.00")
    start_date = datetime.date(2025, 1, 6)
    end_date = None
    role = "Developer"
    status = AllocationStatus.ACTIVE
