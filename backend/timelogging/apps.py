from django.apps import AppConfig


class TimeLoggingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "timelogging"
    verbose_name = "Time Logging"
