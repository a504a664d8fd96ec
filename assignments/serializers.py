from rest_framework import serializers

from .models import Assignment


class AssignmentSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source="staff.fullname", read_only=True)
    service_name = serializers.CharField(source="service.name", read_only=True)
    visit_uid = serializers.CharField(source="visit.visit_uid", read_only=True)
    patient = serializers.CharField(source="visit.patient_id", read_only=True)
    patient_name = serializers.CharField(source="visit.patient.full_name", read_only=True)
    billing_status = serializers.CharField(source="billing.status", read_only=True, default=None)

    class Meta:
        model = Assignment
        fields = [
            "id", "visit", "visit_uid", "patient", "patient_name", "kind", "status",
            "staff", "staff_name", "service", "service_name", "billing", "billing_status",
            "notes", "assigned_by", "started_at", "completed_at", "completed_by",
            "created_at", "updated_at",
        ]
        read_only_fields = fields


class AssignDoctorSerializer(serializers.Serializer):
    visit = serializers.IntegerField()
    doctor = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class NurseServicesSerializer(serializers.Serializer):
    visit = serializers.IntegerField()
    services = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    nurse = serializers.IntegerField(required=False, allow_null=True)


class CompleteServiceSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")
