from rest_framework import serializers

from .enums import ApptStatus, ApptType
from .models import Appointment


class AppointmentSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    doctor_name = serializers.CharField(source="doctor.fullname", read_only=True)
    visit_uid = serializers.CharField(source="visit.visit_uid", read_only=True, default=None)

    class Meta:
        model = Appointment
        fields = [
            "id","patient","patient_name","doctor","doctor_name","appt_type","status",
            "start_at","duration_minutes","reason","notes","visit","visit_uid",
            "created_by","created_at","updated_at",
        ]
        read_only_fields = fields


class AppointmentBookSerializer(serializers.Serializer):
    patient = serializers.CharField()
    doctor = serializers.IntegerField()
    start_at = serializers.DateTimeField()
    appt_type = serializers.ChoiceField(choices=ApptType.choices, default=ApptType.CONSULTATION)
    duration_minutes = serializers.IntegerField(min_value=5, max_value=240, default=25)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AppointmentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ApptStatus.choices, required=False)
    start_at = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
