# backend/timelogging/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied


class InvalidWeek(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Week start must be a Monday in yyyy-MM-dd format."
    default_code = "invalid_week"


class WeekLocked(PermissionDenied):
    default_detail = "This week has been submitted and is read-only."
    default_code = "week_locked"


class SubmissionRejected(APIException):
    """Submit refused by the daily cap check; carries the violated day names."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "submission_blocked"

    def __init__(self, validation):
        super().__init__({
            "detail": validation.error_message,
            "violatedDays": list(validation.violated_days),
        })


class InvalidTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This week cannot move to the requested state."
    default_code = "invalid_transition"
