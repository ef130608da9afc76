from django.apps import AppConfig
from django.contrib import admin


class ResourcePlannerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "resource_planner"
    verbose_name = "Resource Planner"

    def ready(self) -> None:
        """Configure admin site when the app is ready"""
        from django.conf import settings

        admin.site.site_header = getattr(
            settings, "ADMIN_SITE_HEADER", "Resource Planner Administration"
        )
        admin.site.site_title = getattr(
            settings, "ADMIN_SITE_TITLE", "Resource Planner Admin"
        )
        admin.site.index_title = getattr(
            settings, "ADMIN_INDEX_TITLE", "Welcome to Resource Planner Administration"
        )
