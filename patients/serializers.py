from rest_framework import serializers

from .models import Patient


class PatientSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    effective_card_status = serializers.CharField(read_only=True)
    active_visit = serializers.SerializerMethodField()

    class Meta:
        model = Patient
        fields = [
            "id","first_name","middle_name","last_name","full_name","dob","gender",
            "mobile","email","address","emergency_contact_name","emergency_contact_phone",
            "patient_type","status","card_status","effective_card_status",
            "card_activated_at","card_expires_at","active_visit",
            "registered_by","created_at","updated_at",
        ]
        read_only_fields = ["id","patient_type","status","card_status","card_activated_at","card_expires_at",
                            "registered_by","created_at","updated_at"]

    def get_active_visit(self, obj):
        from visits.enums import VisitStatus
        v = obj.visits.exclude(status__in=VisitStatus.terminal()).order_by("-created_at").first()
        return {"id": v.id, "visit_uid": v.visit_uid, "status": v.status} if v else None


class PatientRegisterSerializer(serializers.ModelSerializer):
    """
    Front-desk registration. ``open_visit`` (default true) also opens the
    first visit; ``emergency`` gives a TEMP id and deferred billing.
    """
    open_visit = serializers.BooleanField(default=True, write_only=True)
    emergency = serializers.BooleanField(default=False, write_only=True)

    class Meta:
        model = Patient
        fields = [
            "first_name","middle_name","last_name","dob","gender","mobile","email","address",
            "emergency_contact_name","emergency_contact_phone","open_visit","emergency",
        ]
