from rest_framework import serializers
from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    target_model = serializers.CharField(source="target_ct.model", read_only=True)
    actor_display = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "actor",
            "actor_email",
            "actor_display",
            "ip_address",
            "user_agent",
            "verb",
            "message",
            "target_model",
            "target_id",
            "extra",
            "created_at",
        ]

    def get_actor_display(self, obj):
        if obj.actor:
            return obj.actor.fullname or obj.actor_email
        return obj.actor_email or "System"
