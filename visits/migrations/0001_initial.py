import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("WAITING_FOR_TRIAGE", "Waiting for triage"),
    ("TRIAGED", "Triaged"),
    ("ASSIGNED", "Assigned"),
    ("WAITING_FOR_DOCTOR", "Waiting for doctor"),
    ("IN_PROGRESS", "In progress"),
    ("AWAITING_RESULTS_REVIEW", "Awaiting results review"),
    ("COMPLETED", "Completed"),
    ("CANCELLED", "Cancelled"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("patients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Visit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("visit_uid", models.CharField(editable=False, max_length=32, unique=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="WAITING_FOR_TRIAGE", max_length=32)),
                ("is_emergency", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True)),
                ("diagnosis", models.TextField(blank=True)),
                ("completion_notes", models.TextField(blank=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("completed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="visits_completed", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="visits_created", to=settings.AUTH_USER_MODEL)),
                ("patient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="visits", to="patients.patient")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="visit_status_created_idx"),
                    models.Index(fields=["patient", "status"], name="visit_patient_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VisitTransition",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_status", models.CharField(blank=True, choices=STATUS_CHOICES, max_length=32)),
                ("to_status", models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("actor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("visit", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="transitions", to="visits.visit")),
            ],
            options={"ordering": ["created_at", "id"]},
        ),
    ]
