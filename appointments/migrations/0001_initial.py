import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("patients", "0001_initial"),
        ("visits", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Appointment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("appt_type", models.CharField(choices=[("CONSULTATION", "Consultation"), ("FOLLOW_UP", "Follow-up")], default="CONSULTATION", max_length=16)),
                ("status", models.CharField(choices=[("SCHEDULED", "Scheduled"), ("ARRIVED", "Arrived"), ("IN_PROGRESS", "In progress"), ("COMPLETED", "Completed"), ("CANCELLED", "Cancelled"), ("NO_SHOW", "No-show")], default="SCHEDULED", max_length=16)),
                ("start_at", models.DateTimeField()),
                ("duration_minutes", models.PositiveIntegerField(default=25, validators=[django.core.validators.MinValueValidator(5)])),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="appointments_created", to=settings.AUTH_USER_MODEL)),
                ("doctor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="appointments", to=settings.AUTH_USER_MODEL)),
                ("patient", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="appointments", to="patients.patient")),
                ("visit", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="appointment", to="visits.visit")),
            ],
            options={
                "ordering": ["start_at", "id"],
                "indexes": [
                    models.Index(fields=["doctor", "start_at"], name="appt_doctor_start_idx"),
                    models.Index(fields=["patient", "start_at"], name="appt_patient_start_idx"),
                    models.Index(fields=["status"], name="appt_status_idx"),
                ],
            },
        ),
    ]
