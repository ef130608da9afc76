# backend/timelogging/services.py
"""
Server-side time-logging operations. Every write re-checks the week's
lock and the caller's access here, whatever the client showed.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from allocation.models import AllocationStatus, Resource
from .exceptions import InvalidTransition, InvalidWeek, SubmissionRejected, WeekLocked
from .hours import quantize_hours
from .models import TimeEntry, WeeklySubmission
from .validation import compute_submission_validation
from .weeks import DAYS, day_date, model_field, parse_week_start
from .workflow import (
    WeekStatus,
    can_access_resource,
    can_edit_week,
    can_submit_week,
    can_unsubmit_week,
    derive_week_status,
)

logger = logging.getLogger(__name__)


def resolve_week(value):
    try:
        return parse_week_start(value)
    except ValueError as exc:
        raise InvalidWeek(str(exc))


def ensure_access(actor, resource_id):
    decision = can_access_resource(actor, resource_id)
    if not decision:
        raise PermissionDenied(decision.reason)


def week_entries(resource, week_start):
    return (TimeEntry.objects
            .filter(resource=resource, week_start_date=week_start)
            .select_related("allocation", "allocation__project"))


def _locked_submission(resource, week_start):
    submission, created = (WeeklySubmission.objects
                           .select_for_update()
                           .get_or_create(resource=resource, week_start_date=week_start))
    if created:
        logger.info("Opened week %s for resource %s", week_start, resource.pk)
    return submission


def _total_hours(entries):
    return sum((e.total_hours for e in entries), Decimal("0.00"))


def week_status(submission, entries) -> WeekStatus:
    is_submitted = bool(submission and submission.is_submitted)
    return derive_week_status(is_submitted, [e.to_week_entry() for e in entries])


def upsert_time_entry(actor, resource, allocation, week_start, hours, notes=None, instance=None):
    """
    Create or update the TimeEntry for (allocation, week). `hours` maps day
    name to value; missing days keep their stored value (0.00 on create).
    Raises WeekLocked when the week is submitted.
    """
    if allocation.resource_id != resource.pk:
        raise ValidationError({"allocationId": "Allocation does not belong to this resource."})

    with transaction.atomic():
        submission = _locked_submission(resource, week_start)
        entries = list(week_entries(resource, week_start))
        status = week_status(submission, entries)

        decision = can_edit_week(actor, resource.pk, status)
        if not decision:
            if status is WeekStatus.SUBMITTED:
                logger.warning(
                    "Rejected edit of submitted week %s for resource %s by user %s",
                    week_start, resource.pk, actor.user_id,
                )
                raise WeekLocked(decision.reason)
            raise PermissionDenied(decision.reason)

        if instance is None:
            instance = next((e for e in entries if e.allocation_id == allocation.pk), None)
        elif instance.allocation_id != allocation.pk or instance.week_start_date != week_start:
            raise ValidationError({"detail": "Time entry allocation and week cannot be changed."})

        created = instance is None
        if created:
            instance = TimeEntry(resource=resource, allocation=allocation, week_start_date=week_start)
        for day, value in hours.items():
            setattr(instance, model_field(day), quantize_hours(value))
        if notes is not None:
            instance.notes = notes
        instance.save()

        entries = list(week_entries(resource, week_start))
        submission.total_hours = _total_hours(entries)
        submission.save(update_fields=["total_hours", "updated_at"])

    logger.info(
        "%s time entry %s (allocation %s, week %s)",
        "Created" if created else "Updated", instance.pk, allocation.pk, week_start,
    )
    return instance, created


def submit_week(actor, resource, week_start):
    with transaction.atomic():
        submission = _locked_submission(resource, week_start)
        entries = list(week_entries(resource, week_start))
        status = week_status(submission, entries)

        decision = can_submit_week(actor, resource.pk, status)
        if not decision:
            if status is WeekStatus.SUBMITTED:
                raise InvalidTransition(decision.reason)
            raise PermissionDenied(decision.reason)

        validation = compute_submission_validation([e.to_week_entry() for e in entries])
        if not validation.can_submit:
            logger.info(
                "Submission blocked for resource %s week %s: %s",
                resource.pk, week_start, ", ".join(validation.violated_days),
            )
            raise SubmissionRejected(validation)

        submission.is_submitted = True
        submission.submitted_at = timezone.now()
        submission.total_hours = _total_hours(entries)
        submission.save()

    logger.info("Resource %s submitted week %s (%sh)", resource.pk, week_start, submission.total_hours)
    return submission


def unsubmit_week(actor, resource, week_start):
    if not actor.is_admin:
        raise PermissionDenied("Only administrators can unsubmit a week")

    with transaction.atomic():
        submission = (WeeklySubmission.objects
                      .select_for_update()
                      .filter(resource=resource, week_start_date=week_start)
                      .first())
        status = week_status(submission, [])
        decision = can_unsubmit_week(actor, resource.pk, status)
        if not decision:
            raise InvalidTransition(decision.reason)

        submission.is_submitted = False
        submission.submitted_at = None
        submission.save()

    logger.info("User %s reopened week %s for resource %s", actor.user_id, week_start, resource.pk)
    return submission


def get_submission(resource, week_start):
    submission = WeeklySubmission.objects.filter(resource=resource, week_start_date=week_start).first()
    if submission is None:
        raise NotFound("No submission for this week.")
    return submission


def _allocated_during(week_start):
    week_end = day_date(week_start, DAYS[-1])
    return (
        Q(allocations__status=AllocationStatus.ACTIVE)
        & Q(allocations__start_date__lte=week_end)
        & (Q(allocations__end_date__isnull=True) | Q(allocations__end_date__gte=week_start))
    )


def submission_overview(week_start, department=None):
    """Per active resource: its submission (if any), status and whether time was logged."""
    resources = Resource.objects.filter(is_active=True)
    if department:
        resources = resources.filter(department=department)

    submissions = {
        s.resource_id: s
        for s in WeeklySubmission.objects.filter(week_start_date=week_start, resource__in=resources)
    }
    entries_by_resource = {}
    for entry in TimeEntry.objects.filter(week_start_date=week_start, resource__in=resources):
        entries_by_resource.setdefault(entry.resource_id, []).append(entry)

    rows = []
    for resource in resources:
        entries = entries_by_resource.get(resource.pk, [])
        submission = submissions.get(resource.pk)
        rows.append({
            "resource": resource,
            "submission": submission,
            "status": week_status(submission, entries),
            "has_time_entries": bool(entries),
            "total_hours": _total_hours(entries),
        })
    return rows


def unsubmitted_resources(week_start):
    """Active resources with an active allocation that week and no submitted week."""
    submitted = WeeklySubmission.objects.filter(
        week_start_date=week_start, is_submitted=True,
    ).values("resource_id")
    return (Resource.objects
            .filter(is_active=True)
            .filter(_allocated_during(week_start))
            .exclude(pk__in=submitted)
            .distinct()
            .prefetch_related("users"))
