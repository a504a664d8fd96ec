import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

FLAGS = [("GREEN", "Green"), ("YELLOW", "Yellow"), ("RED", "Red")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("patients", "0001_initial"),
        ("visits", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="VitalSign",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=[("TRIAGE", "Triage"), ("CONTINUOUS", "Monitoring")], default="CONTINUOUS", max_length=12)),
                ("measured_at", models.DateTimeField()),
                ("systolic", models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(40), django.core.validators.MaxValueValidator(300)])),
                ("diastolic", models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(20), django.core.validators.MaxValueValidator(200)])),
                ("heart_rate", models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(20), django.core.validators.MaxValueValidator(250)])),
                ("temp_c", models.DecimalField(blank=True, decimal_places=1, max_digits=4, null=True)),
                ("resp_rate", models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(5), django.core.validators.MaxValueValidator(80)])),
                ("spo2", models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(50), django.core.validators.MaxValueValidator(100)])),
                ("pain_score", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MaxValueValidator(10)])),
                ("blood_sugar", models.DecimalField(blank=True, decimal_places=1, max_digits=5, null=True)),
                ("weight_kg", models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True, validators=[django.core.validators.MinValueValidator(Decimal("0.0"))])),
                ("height_cm", models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True, validators=[django.core.validators.MinValueValidator(Decimal("0.0"))])),
                ("bmi", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("bp_flag", models.CharField(blank=True, choices=FLAGS, max_length=8, null=True)),
                ("temp_flag", models.CharField(blank=True, choices=FLAGS, max_length=8, null=True)),
                ("spo2_flag", models.CharField(blank=True, choices=FLAGS, max_length=8, null=True)),
                ("overall", models.CharField(choices=FLAGS, default="GREEN", max_length=8)),
                ("chief_complaint", models.CharField(blank=True, max_length=255)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("patient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="vitals", to="patients.patient")),
                ("recorded_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="vitals_recorded", to=settings.AUTH_USER_MODEL)),
                ("visit", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="vitals", to="visits.visit")),
            ],
            options={
                "ordering": ["-measured_at", "-id"],
                "indexes": [
                    models.Index(fields=["patient", "measured_at"], name="vitals_patient_measured_idx"),
                    models.Index(fields=["visit", "kind"], name="vitals_visit_kind_idx"),
                ],
            },
        ),
    ]
