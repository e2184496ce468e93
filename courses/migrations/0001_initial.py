import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Participant",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("phone", models.CharField(blank=True, max_length=50, null=True)),
                ("age", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("allergies", models.JSONField(blank=True, default=list)),
                ("dietary_restrictions", models.JSONField(blank=True, default=list)),
                ("emergency_contact", models.JSONField(blank=True, null=True)),
                ("registration_date", models.DateTimeField()),
                ("is_active", models.BooleanField(default=True)),
                ("version", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["-registration_date"],
                "indexes": [
                    models.Index(
                        fields=["is_active", "-registration_date"],
                        name="participant_active_reg_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Lesson",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField()),
                (
                    "skill_level",
                    models.CharField(
                        choices=[
                            ("beginner", "Beginner"),
                            ("intermediate", "Intermediate"),
                            ("advanced", "Advanced"),
                        ],
                        max_length=20,
                    ),
                ),
                ("duration", models.PositiveIntegerField(help_text="Duration in minutes")),
                ("max_participants", models.PositiveIntegerField()),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("date_time", models.DateTimeField()),
                ("location", models.CharField(blank=True, default="", max_length=200)),
                ("instructor", models.CharField(blank=True, default="", max_length=200)),
                ("ingredients", models.JSONField(blank=True, default=list)),
                ("equipment", models.JSONField(blank=True, default=list)),
                ("techniques", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="scheduled",
                        max_length=20,
                    ),
                ),
                ("enrollments", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                ("version", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["date_time"],
                "indexes": [
                    models.Index(fields=["date_time"], name="lesson_date_time_idx"),
                    models.Index(
                        fields=["status", "date_time"], name="lesson_status_date_idx"
                    ),
                ],
            },
        ),
    ]
