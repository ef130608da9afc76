# backend/timelogging/models.py
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from .entries import WeekEntry
from .hours import HOURS_MAX, HOURS_MIN
from .weeks import DAYS, model_field


def _hours_field():
    return models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(HOURS_MIN), MaxValueValidator(HOURS_MAX)],
    )


class TimeEntry(models.Model):
    """
    Hours one resource logged against one allocation in one week.
    """
    resource = models.ForeignKey("allocation.Resource", on_delete=models.CASCADE, related_name="time_entries")
    allocation = models.ForeignKey(
        "allocation.ResourceAllocation", on_delete=models.CASCADE, related_name="time_entries",
    )
    week_start_date = models.DateField(db_index=True)
    monday_hours = _hours_field()
    tuesday_hours = _hours_field()
    wednesday_hours = _hours_field()
    thursday_hours = _hours_field()
    friday_hours = _hours_field()
    saturday_hours = _hours_field()
    sunday_hours = _hours_field()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Time Entry"
        verbose_name_plural = "Time Entries"
        unique_together = ("allocation", "week_start_date")
        ordering = ["week_start_date", "allocation__project__name"]

    def __str__(self):
        return f"{self.resource_id}/{self.allocation_id} week of {self.week_start_date}: {self.total_hours}h"

    def hours_for(self, day):
        return getattr(self, model_field(day))

    @property
    def total_hours(self):
        return sum((self.hours_for(d) or Decimal("0")) for d in DAYS)

    def to_week_entry(self):
        return WeekEntry(
            allocation_id=self.allocation_id,
            hours={day: self.hours_for(day) for day in DAYS},
            id=self.pk,
            notes=self.notes,
        )


class WeeklySubmission(models.Model):
    """
    Submission state of one resource's week. Once `is_submitted` is set the
    week's time entries are read-only until an admin unsubmits it.
    """
    resource = models.ForeignKey("allocation.Resource", on_delete=models.CASCADE, related_name="weekly_submissions")
    week_start_date = models.DateField(db_index=True)
    is_submitted = models.BooleanField(default=False)
    submitted_at = models.DateTimeField(null=True, blank=True)
    total_hours = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Weekly Submission"
        verbose_name_plural = "Weekly Submissions"
        unique_together = ("resource", "week_start_date")
        ordering = ["-week_start_date"]

    def __str__(self):
        state = "submitted" if self.is_submitted else "open"
        return f"{self.resource_id} week of {self.week_start_date} ({state})"
