import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

phone = django.core.validators.RegexValidator(
    message="Phone must be 7-15 digits, optionally starting with +.", regex="^\\+?\\d{7,15}$"
)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="IdentifierSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=64, unique=True)),
                ("last_value", models.PositiveIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name="Patient",
            fields=[
                ("id", models.CharField(editable=False, max_length=32, primary_key=True, serialize=False)),
                ("first_name", models.CharField(max_length=120)),
                ("last_name", models.CharField(blank=True, max_length=120)),
                ("middle_name", models.CharField(blank=True, max_length=120)),
                ("dob", models.DateField(blank=True, null=True)),
                ("gender", models.CharField(blank=True, choices=[("MALE", "Male"), ("FEMALE", "Female"), ("OTHER", "Other")], max_length=8)),
                ("mobile", models.CharField(blank=True, db_index=True, max_length=20, validators=[phone])),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("address", models.TextField(blank=True)),
                ("emergency_contact_name", models.CharField(blank=True, max_length=120)),
                ("emergency_contact_phone", models.CharField(blank=True, max_length=20, validators=[phone])),
                ("patient_type", models.CharField(choices=[("REGULAR", "Regular"), ("EMERGENCY", "Emergency")], default="REGULAR", max_length=12)),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive")], default="ACTIVE", max_length=12)),
                ("card_status", models.CharField(choices=[("INACTIVE", "Inactive"), ("ACTIVE", "Active"), ("EXPIRED", "Expired")], default="INACTIVE", max_length=12)),
                ("card_activated_at", models.DateTimeField(blank=True, null=True)),
                ("card_expires_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("registered_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="patients_registered", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["last_name", "first_name"], name="patient_name_idx"),
                    models.Index(fields=["created_at"], name="patient_created_idx"),
                ],
            },
        ),
    ]
