from django.contrib import admin
from .models import Project, Resource, ResourceAllocation


class ResourceAllocationInline(admin.TabularInline):
    model = ResourceAllocation
    extra = 0
    fields = ["project", "allocated_hours", "start_date", "end_date", "role", "status"]


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ["name", "status", "start_date", "end_date"]
    list_filter = ["status"]
    search_fields = ["name", "description"]


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    inlines = [ResourceAllocationInline]
    list_display = ["name", "email", "department", "role", "weekly_capacity", "is_active"]
    list_filter = ["is_active", "department"]
    search_fields = ["name", "email"]


@admin.register(ResourceAllocation)
class ResourceAllocationAdmin(admin.ModelAdmin):
    list_display = ["resource", "project", "allocated_hours", "start_date", "end_date", "status"]
    list_filter = ["status"]
    search_fields = ["resource__name", "project__name"]
    list_select_related = ["resource", "project"]
