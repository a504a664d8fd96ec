from rest_framework import serializers

from .models import Visit, VisitTransition


class VisitTransitionSerializer(serializers.ModelSerializer):
    actor_name = serializers.SerializerMethodField()

    class Meta:
        model = VisitTransition
        fields = ["id", "from_status", "to_status", "actor", "actor_name", "reason", "created_at"]

    def get_actor_name(self, obj):
        return obj.actor.fullname if obj.actor_id else "System"


class VisitListSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    doctor = serializers.SerializerMethodField()

    class Meta:
        model = Visit
        fields = ["id", "visit_uid", "patient", "patient_name", "status", "is_emergency", "doctor", "created_at", "updated_at"]

    def get_doctor(self, obj):
        a = next((x for x in obj.assignments.all() if x.kind == "DOCTOR" and x.status != "CANCELLED"), None)
        return {"id": a.staff_id, "name": a.staff.fullname} if a else None


class VisitSerializer(VisitListSerializer):
    transitions = VisitTransitionSerializer(many=True, read_only=True)

    class Meta(VisitListSerializer.Meta):
        fields = VisitListSerializer.Meta.fields + [
            "notes", "diagnosis", "completion_notes",
            "created_by", "completed_at", "completed_by", "cancelled_at", "cancel_reason",
            "transitions",
        ]


class VisitOpenSerializer(serializers.Serializer):
    patient = serializers.CharField()
    is_emergency = serializers.BooleanField(default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class VisitCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)


class VisitCompleteSerializer(serializers.Serializer):
    diagnosis = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
