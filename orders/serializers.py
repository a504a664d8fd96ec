from rest_framework import serializers

from .enums import OrderType
from .models import Order, OrderBatch, ResultTemplate
from .templates import template_problems


class ResultTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = ResultTemplate
        fields = ["id", "code", "name", "category", "order_type", "fields", "services", "is_active",
                  "created_at", "updated_at"]
        read_only_fields = ["created_at", "updated_at"]

    def validate_code(self, value):
        return (value or "").strip().upper()

    def validate_fields(self, value):
        problems = template_problems(value)
        if problems:
            raise serializers.ValidationError(problems)
        return value


class OrderSerializer(serializers.ModelSerializer):
    service_code = serializers.CharField(source="service.code", read_only=True)
    service_name = serializers.CharField(source="service.name", read_only=True)
    visit_uid = serializers.CharField(source="visit.visit_uid", read_only=True)
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    template_fields = serializers.SerializerMethodField()
    billing = serializers.IntegerField(source="batch.billing_id", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id", "batch", "visit", "visit_uid", "patient", "patient_name", "order_type",
            "service", "service_code", "service_name", "template", "template_fields",
            "billing", "status", "result", "warnings", "notes", "cancel_reason",
            "started_at", "completed_at", "completed_by", "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_template_fields(self, obj):
        return obj.template.fields if obj.template_id else None


class OrderBatchSerializer(serializers.ModelSerializer):
    orders = OrderSerializer(many=True, read_only=True)
    total_amount = serializers.DecimalField(source="billing.total_amount", max_digits=12, decimal_places=2,
                                            read_only=True, default=None)

    class Meta:
        model = OrderBatch
        fields = ["id", "visit", "patient", "order_type", "instructions", "billing", "total_amount",
                  "ordered_by", "created_at", "orders"]


class OrderCreateSerializer(serializers.Serializer):
    visit = serializers.IntegerField()
    order_type = serializers.ChoiceField(choices=OrderType.choices, required=False)
    services = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    instructions = serializers.CharField(required=False, allow_blank=True, default="")


class ResultSubmitSerializer(serializers.Serializer):
    values = serializers.DictField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    confirm_warnings = serializers.BooleanField(default=False)


class OrderCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)


class TemplateCheckSerializer(serializers.Serializer):
    values = serializers.DictField()
