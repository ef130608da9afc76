# backend/timelogging/serializers.py
from decimal import Decimal

from rest_framework import serializers

from allocation.serializers import ResourceAllocationSerializer, ResourceSerializer
from .hours import HOURS_MAX, HOURS_MIN
from .models import TimeEntry, WeeklySubmission
from .services import resolve_week
from .weeks import DAYS, api_field
from .workflow import WeekStatus


class HoursField(serializers.DecimalField):
    """Day value: 2 decimal places in [0, 24]; blank or null is stored as 0.00."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 4)
        kwargs.setdefault("decimal_places", 2)
        kwargs.setdefault("min_value", HOURS_MIN)
        kwargs.setdefault("max_value", HOURS_MAX)
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_null", True)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if data is None or (isinstance(data, str) and not data.strip()):
            return (True, Decimal("0.00"))
        return super().validate_empty_values(data)


class TimeEntrySerializer(serializers.ModelSerializer):
    """Read shape: camelCase day fields plus the nested allocation and project."""
    resourceId = serializers.IntegerField(source="resource_id", read_only=True)
    allocationId = serializers.IntegerField(source="allocation_id", read_only=True)
    weekStartDate = serializers.DateField(source="week_start_date", read_only=True)
    totalHours = serializers.DecimalField(source="total_hours", max_digits=5, decimal_places=2, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    mondayHours = serializers.DecimalField(source="monday_hours", max_digits=4, decimal_places=2, read_only=True)
    tuesdayHours = serializers.DecimalField(source="tuesday_hours", max_digits=4, decimal_places=2, read_only=True)
    wednesdayHours = serializers.DecimalField(source="wednesday_hours", max_digits=4, decimal_places=2, read_only=True)
    thursdayHours = serializers.DecimalField(source="thursday_hours", max_digits=4, decimal_places=2, read_only=True)
    fridayHours = serializers.DecimalField(source="friday_hours", max_digits=4, decimal_places=2, read_only=True)
    saturdayHours = serializers.DecimalField(source="saturday_hours", max_digits=4, decimal_places=2, read_only=True)
    sundayHours = serializers.DecimalField(source="sunday_hours", max_digits=4, decimal_places=2, read_only=True)
    allocation = ResourceAllocationSerializer(read_only=True)

    class Meta:
        model = TimeEntry
        fields = [
            "id", "resourceId", "allocationId", "weekStartDate",
            *[api_field(d) for d in DAYS],
            "notes", "totalHours", "createdAt", "updatedAt", "allocation",
        ]


class TimeEntryWriteSerializer(serializers.Serializer):
    """Body of POST /time-entries and PUT /time-entries/<id>."""
    resourceId = serializers.IntegerField()
    allocationId = serializers.IntegerField()
    weekStartDate = serializers.CharField()
    mondayHours = HoursField()
    tuesdayHours = HoursField()
    wednesdayHours = HoursField()
    thursdayHours = HoursField()
    fridayHours = HoursField()
    saturdayHours = HoursField()
    sundayHours = HoursField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_weekStartDate(self, value):
        return resolve_week(value)

    def validate(self, attrs):
        attrs["hours"] = {day: attrs.pop(api_field(day)) for day in DAYS if api_field(day) in attrs}
        return attrs


class WeeklySubmissionSerializer(serializers.ModelSerializer):
    resourceId = serializers.IntegerField(source="resource_id", read_only=True)
    weekStartDate = serializers.DateField(source="week_start_date", read_only=True)
    isSubmitted = serializers.BooleanField(source="is_submitted", read_only=True)
    submittedAt = serializers.DateTimeField(source="submitted_at", read_only=True)
    totalHours = serializers.DecimalField(source="total_hours", max_digits=5, decimal_places=2, read_only=True)
    status = serializers.SerializerMethodField()

    class Meta:
        model = WeeklySubmission
        fields = ["id", "resourceId", "weekStartDate", "isSubmitted", "submittedAt", "totalHours", "status"]

    def get_status(self, obj):
        if obj.is_submitted:
            return WeekStatus.SUBMITTED.value
        if obj.total_hours and obj.total_hours > 0:
            return WeekStatus.IN_PROGRESS.value
        return WeekStatus.NOT_STARTED.value


class SubmissionOverviewRowSerializer(serializers.Serializer):
    resource = ResourceSerializer()
    department = serializers.SerializerMethodField()
    submission = WeeklySubmissionSerializer(allow_null=True)
    status = serializers.SerializerMethodField()
    hasTimeEntries = serializers.BooleanField(source="has_time_entries")
    totalHours = serializers.DecimalField(source="total_hours", max_digits=6, decimal_places=2)

    def get_department(self, row):
        return {"name": row["resource"].department}

    def get_status(self, row):
        return row["status"].value


class UnsubmittedResourceSerializer(ResourceSerializer):
    users = serializers.SerializerMethodField()

    class Meta(ResourceSerializer.Meta):
        fields = ResourceSerializer.Meta.fields + ["users"]

    def get_users(self, obj):
        return [{"id": u.id, "username": u.username, "email": u.email} for u in obj.users.all()]
