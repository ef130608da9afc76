from django.contrib import admin
from .models import TimeEntry, WeeklySubmission


@admin.register(TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = [
        'resource', 'allocation', 'week_start_date',
        'monday_hours', 'tuesday_hours', 'wednesday_hours', 'thursday_hours',
        'friday_hours', 'saturday_hours', 'sunday_hours', 'get_total',
    ]
    list_filter = ['week_start_date']
    search_fields = ['resource__name', 'allocation__project__name', 'notes']
    list_select_related = ['resource', 'allocation', 'allocation__project']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'week_start_date'

    @admin.display(description='Total')
    def get_total(self, obj):
        return obj.total_hours


@admin.register(WeeklySubmission)
class WeeklySubmissionAdmin(admin.ModelAdmin):
    list_display = ['resource', 'week_start_date', 'is_submitted', 'submitted_at', 'total_hours']
    list_filter = ['is_submitted', 'week_start_date']
    search_fields = ['resource__name', 'resource__email']
    list_select_related = ['resource']
    readonly_fields = ['created_at', 'updated_at', 'submitted_at', 'total_hours']
    date_hierarchy = 'week_start_date'
