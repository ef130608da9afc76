"""
Factory classes for time entries and weekly submissions.
"""
import datetime
from decimal import Decimal

import factory
from factory.django import DjangoModelFactory

from allocation.factory import ResourceAllocationFactory
from .models import TimeEntry, WeeklySubmission

WEEK = datetime.date(2025, 6, 2)


class TimeEntryFactory(DjangoModelFactory):
    """All days default to zero; pass e.g. monday_hours=Decimal('8')."""

    class Meta:
        model = TimeEntry

    allocation = factory.SubFactory(ResourceAllocationFactory)
    resource = factory.SelfAttribute('allocation.resource')
    week_start_date = WEEK
    notes = ""


class WeeklySubmissionFactory(DjangoModelFactory):
    class Meta:
        model = WeeklySubmission
        django_get_or_create = ('resource', 'week_start_date')

    resource = factory.SubFactory('allocation.factory.ResourceFactory')
    week_start_date = WEEK
    is_submitted = False
    total_hours = Decimal("0.00")
