import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

TYPES = [("LAB", "Laboratory"), ("RADIOLOGY", "Radiology"), ("DENTAL", "Dental")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("billing", "0001_initial"),
        ("patients", "0001_initial"),
        ("visits", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ResultTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=40, unique=True)),
                ("name", models.CharField(max_length=160)),
                ("category", models.CharField(blank=True, max_length=80)),
                ("order_type", models.CharField(choices=TYPES, max_length=12)),
                ("fields", models.JSONField(default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("services", models.ManyToManyField(blank=True, related_name="result_templates", to="billing.service")),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="OrderBatch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_type", models.CharField(choices=TYPES, max_length=12)),
                ("instructions", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("billing", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="order_batches", to="billing.billing")),
                ("ordered_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="order_batches", to=settings.AUTH_USER_MODEL)),
                ("patient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_batches", to="patients.patient")),
                ("visit", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_batches", to="visits.visit")),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_type", models.CharField(choices=TYPES, max_length=12)),
                ("status", models.CharField(choices=[("UNPAID", "Unpaid"), ("PAID", "Paid"), ("QUEUED", "Queued"), ("IN_PROGRESS", "In Progress"), ("COMPLETED", "Completed"), ("CANCELLED", "Cancelled")], default="UNPAID", max_length=12)),
                ("result", models.JSONField(blank=True, default=dict)),
                ("warnings", models.JSONField(blank=True, default=list)),
                ("notes", models.TextField(blank=True)),
                ("cancel_reason", models.CharField(blank=True, max_length=255)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("batch", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="orders.orderbatch")),
                ("billing_line", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="billing.billingline")),
                ("completed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders_completed", to=settings.AUTH_USER_MODEL)),
                ("patient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="patients.patient")),
                ("service", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="billing.service")),
                ("started_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("template", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="orders.resulttemplate")),
                ("visit", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="visits.visit")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["order_type", "status", "created_at"], name="order_type_status_idx"),
                    models.Index(fields=["visit", "status"], name="order_visit_status_idx"),
                    models.Index(fields=["patient", "created_at"], name="order_patient_created_idx"),
                ],
            },
        ),
    ]
