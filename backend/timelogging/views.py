# backend/timelogging/views.py
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiParameter

from allocation.models import Resource, ResourceAllocation
from users.permissions import CanAccessResource, IsTimeLoggingAdmin
from . import services
from .models import TimeEntry
from .serializers import (
    SubmissionOverviewRowSerializer,
    TimeEntrySerializer,
    TimeEntryWriteSerializer,
    UnsubmittedResourceSerializer,
    WeeklySubmissionSerializer,
)
from .workflow import Actor

logger = logging.getLogger(__name__)

TIME_ENTRY_EXAMPLE = OpenApiExample(
    "Time entry",
    value={
        "resourceId": 1,
        "allocationId": 3,
        "weekStartDate": "2025-06-02",
        "mondayHours": "8.00",
        "tuesdayHours": "7.50",
        "wednesdayHours": "8.00",
        "thursdayHours": "",
        "fridayHours": "4.00",
        "saturdayHours": "0.00",
        "sundayHours": "0.00",
        "notes": "Sprint planning on Monday",
    },
    request_only=True,
)


def _entry_response(instance, status_code):
    instance = TimeEntry.objects.select_related("allocation", "allocation__project").get(pk=instance.pk)
    return Response(TimeEntrySerializer(instance).data, status=status_code)


class WeekTimeEntriesView(APIView):
    """
    GET /api/resources/<id>/time-entries/week/<weekStart>
    """
    permission_classes = [CanAccessResource]

    @extend_schema(responses={200: TimeEntrySerializer(many=True)})
    def get(self, request, resource_id, week_start):
        resource = get_object_or_404(Resource, pk=resource_id)
        week = services.resolve_week(week_start)
        entries = services.week_entries(resource, week)
        return Response(TimeEntrySerializer(entries, many=True).data)


class TimeEntryCreateView(APIView):
    """
    POST /api/time-entries
    Upsert on (allocation, week): an existing entry for the pair is updated.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=TimeEntryWriteSerializer,
        responses={201: TimeEntrySerializer, 200: TimeEntrySerializer},
        examples=[TIME_ENTRY_EXAMPLE],
    )
    def post(self, request):
        s = TimeEntryWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        resource = get_object_or_404(Resource, pk=data["resourceId"])
        allocation = get_object_or_404(ResourceAllocation, pk=data["allocationId"])
        actor = Actor.from_user(request.user)
        services.ensure_access(actor, resource.pk)

        instance, created = services.upsert_time_entry(
            actor,
            resource,
            allocation,
            data["weekStartDate"],
            data["hours"],
            notes=data.get("notes"),
        )
        return _entry_response(instance, status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class TimeEntryDetailView(APIView):
    """
    GET / PUT /api/time-entries/<id>
    """
    permission_classes = [CanAccessResource]

    def get_object(self, pk):
        instance = get_object_or_404(
            TimeEntry.objects.select_related("allocation", "allocation__project"), pk=pk,
        )
        self.check_object_permissions(self.request, instance)
        return instance

    @extend_schema(responses={200: TimeEntrySerializer})
    def get(self, request, pk):
        return Response(TimeEntrySerializer(self.get_object(pk)).data)

    @extend_schema(
        request=TimeEntryWriteSerializer,
        responses={200: TimeEntrySerializer},
        examples=[TIME_ENTRY_EXAMPLE],
    )
    def put(self, request, pk):
        instance = self.get_object(pk)
        s = TimeEntryWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        if data["resourceId"] != instance.resource_id:
            return Response(
                {"detail": "Time entry belongs to a different resource."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if data["allocationId"] != instance.allocation_id:
            return Response(
                {"detail": "Time entry allocation cannot be changed."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        instance, _ = services.upsert_time_entry(
            Actor.from_user(request.user),
            instance.resource,
            instance.allocation,
            data["weekStartDate"],
            data["hours"],
            notes=data.get("notes"),
            instance=instance,
        )
        return _entry_response(instance, status.HTTP_200_OK)


class WeeklySubmissionView(APIView):
    """
    GET /api/resources/<id>/weekly-submissions/week/<weekStart>
    404 when the week has never been opened.
    """
    permission_classes = [CanAccessResource]

    @extend_schema(responses={200: WeeklySubmissionSerializer})
    def get(self, request, resource_id, week_start):
        resource = get_object_or_404(Resource, pk=resource_id)
        submission = services.get_submission(resource, services.resolve_week(week_start))
        return Response(WeeklySubmissionSerializer(submission).data)


class SubmitWeekView(APIView):
    """
    POST /api/time-logging/submit/<resourceId>/<weekStart>
    Re-validates the stored entries; 400 with `violatedDays` when a day is over the cap.
    """
    permission_classes = [CanAccessResource]

    @extend_schema(request=None, responses={200: WeeklySubmissionSerializer})
    def post(self, request, resource_id, week_start):
        resource = get_object_or_404(Resource, pk=resource_id)
        submission = services.submit_week(
            Actor.from_user(request.user), resource, services.resolve_week(week_start),
        )
        return Response(WeeklySubmissionSerializer(submission).data, status=status.HTTP_200_OK)


class UnsubmitWeekView(APIView):
    """
    POST /api/time-logging/unsubmit/<resourceId>/<weekStart>  (admin only)
    """
    permission_classes = [IsTimeLoggingAdmin]

    @extend_schema(request=None, responses={200: WeeklySubmissionSerializer})
    def post(self, request, resource_id, week_start):
        resource = get_object_or_404(Resource, pk=resource_id)
        submission = services.unsubmit_week(
            Actor.from_user(request.user), resource, services.resolve_week(week_start),
        )
        return Response(WeeklySubmissionSerializer(submission).data, status=status.HTTP_200_OK)


class SubmissionOverviewView(APIView):
    """
    GET /api/time-logging/submission-overview?week=yyyy-MM-dd&department=
    """
    permission_classes = [IsTimeLoggingAdmin]

    @extend_schema(
        parameters=[
            OpenApiParameter("week", str, required=True, description="Week start (Monday), yyyy-MM-dd"),
            OpenApiParameter("department", str),
        ],
        responses={200: SubmissionOverviewRowSerializer(many=True)},
    )
    def get(self, request):
        week = services.resolve_week(request.query_params.get("week") or "")
        rows = services.submission_overview(week, request.query_params.get("department"))
        return Response(SubmissionOverviewRowSerializer(rows, many=True).data)


class UnsubmittedResourcesView(APIView):
    """
    GET /api/time-logging/unsubmitted/<weekStart>
    """
    permission_classes = [IsTimeLoggingAdmin]

    @extend_schema(responses={200: UnsubmittedResourceSerializer(many=True)})
    def get(self, request, week_start):
        resources = services.unsubmitted_resources(services.resolve_week(week_start))
        return Response(UnsubmittedResourceSerializer(resources, many=True).data)
