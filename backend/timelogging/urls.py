# backend/timelogging/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path("resources/<int:resource_id>/time-entries/week/<str:week_start>",
         views.WeekTimeEntriesView.as_view(), name="week_time_entries"),
    path("resources/<int:resource_id>/weekly-submissions/week/<str:week_start>",
         views.WeeklySubmissionView.as_view(), name="weekly_submission"),

    path("time-entries", views.TimeEntryCreateView.as_view(), name="time_entry_create"),
    path("time-entries/<int:pk>", views.TimeEntryDetailView.as_view(), name="time_entry_detail"),

    path("time-logging/submit/<int:resource_id>/<str:week_start>",
         views.SubmitWeekView.as_view(), name="submit_week"),
    path("time-logging/unsubmit/<int:resource_id>/<str:week_start>",
         views.UnsubmitWeekView.as_view(), name="unsubmit_week"),
    path("time-logging/submission-overview",
         views.SubmissionOverviewView.as_view(), name="submission_overview"),
    path("time-logging/unsubmitted/<str:week_start>",
         views.UnsubmittedResourcesView.as_view(), name="unsubmitted_resources"),
]
