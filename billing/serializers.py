from django.conf import settings
from rest_framework import serializers

from .enums import PaymentMethod
from .models import Billing, BillingLine, Payment, Service


# --- Catalog ---
class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ["id", "code", "name", "category", "price", "is_active"]

    def validate_code(self, value):
        return (value or "").strip().upper()


# --- Billings ---
class BillingLineSerializer(serializers.ModelSerializer):
    service_code = serializers.CharField(source="service.code", read_only=True)
    service_name = serializers.CharField(source="service.name", read_only=True)

    class Meta:
        model = BillingLine
        fields = ["id", "service", "service_code", "service_name", "description",
                  "quantity", "unit_price", "total_price"]


class BillingListSerializer(serializers.ModelSerializer):
    patient_name = serializers.SerializerMethodField()
    visit_uid = serializers.CharField(source="visit.visit_uid", read_only=True, default=None)
    currency = serializers.SerializerMethodField()

    class Meta:
        model = Billing
        fields = ["id", "patient", "patient_name", "visit", "visit_uid", "kind", "status",
                  "total_amount", "currency", "created_at", "paid_at"]

    def get_currency(self, obj):
        return settings.CLINIC_CURRENCY

    def get_patient_name(self, obj):
        p = getattr(obj, "patient", None)
        return p.full_name if p else ""


class BillingSerializer(BillingListSerializer):
    lines = BillingLineSerializer(many=True, read_only=True)
    payments = serializers.SerializerMethodField()

    class Meta(BillingListSerializer.Meta):
        fields = BillingListSerializer.Meta.fields + ["notes", "lines", "payments", "insurance_settled_at", "created_by"]

    def get_payments(self, obj):
        return PaymentReadSerializer(obj.payments.all(), many=True).data


# --- Payments ---
class PaymentCreateSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=PaymentMethod.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    reference = serializers.CharField(required=False, allow_blank=True, max_length=64)
    bank_name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    insurer = serializers.CharField(required=False, allow_blank=True, max_length=160)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=255)


class PaymentReadSerializer(serializers.ModelSerializer):
    received_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = ["id", "billing", "patient", "amount", "method", "reference", "bank_name",
                  "insurer", "notes", "received_by", "received_by_name", "received_at"]

    def get_received_by_name(self, obj):
        u = getattr(obj, "received_by", None)
        return u.fullname if u else ""


class AddLineSerializer(serializers.Serializer):
    service = serializers.PrimaryKeyRelatedField(queryset=Service.objects.filter(is_active=True))
    quantity = serializers.IntegerField(min_value=1, default=1)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)


class SettleInsuranceSerializer(serializers.Serializer):
    reference = serializers.CharField(required=False, allow_blank=True, max_length=64)
