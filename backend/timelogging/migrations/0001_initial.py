from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


def hours_field():
    return models.DecimalField(
        decimal_places=2,
        default=Decimal("0.00"),
        max_digits=4,
        validators=[
            django.core.validators.MinValueValidator(Decimal("0")),
            django.core.validators.MaxValueValidator(Decimal("24")),
        ],
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("allocation", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="TimeEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("week_start_date", models.DateField(db_index=True)),
                ("monday_hours", hours_field()),
                ("tuesday_hours", hours_field()),
                ("wednesday_hours", hours_field()),
                ("thursday_hours", hours_field()),
                ("friday_hours", hours_field()),
                ("saturday_hours", hours_field()),
                ("sunday_hours", hours_field()),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("allocation", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="time_entries", to="allocation.resourceallocation")),
                ("resource", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="time_entries", to="allocation.resource")),
            ],
            options={
                "verbose_name": "Time Entry",
                "verbose_name_plural": "Time Entries",
                "ordering": ["week_start_date", "allocation__project__name"],
                "unique_together": {("allocation", "week_start_date")},
            },
        ),
        migrations.CreateModel(
            name="WeeklySubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("week_start_date", models.DateField(db_index=True)),
                ("is_submitted", models.BooleanField(default=False)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("total_hours", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("resource", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="weekly_submissions", to="allocation.resource")),
            ],
            options={
                "verbose_name": "Weekly Submission",
                "verbose_name_plural": "Weekly Submissions",
                "ordering": ["-week_start_date"],
                "unique_together": {("resource", "week_start_date")},
            },
        ),
    ]
