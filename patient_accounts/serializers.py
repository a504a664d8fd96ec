from rest_framework import serializers

from billing.enums import PaymentMethod
from .enums import AccountStatus, AccountType, RequestType
from .models import AccountRequest, AccountTransaction, PatientAccount


class PatientAccountSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)

    class Meta:
        model = PatientAccount
        fields = ["id", "patient", "patient_name", "account_type", "status", "balance", "debt_owed",
                  "total_deposited", "total_used", "total_debt_paid", "verified_by", "verified_at",
                  "created_at", "updated_at"]
        read_only_fields = fields


class AccountTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = AccountTransaction
        fields = ["id", "type", "amount", "balance_before", "balance_after", "billing", "request",
                  "processed_by", "notes", "created_at"]


class AccountRequestSerializer(serializers.ModelSerializer):
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    requested_by_name = serializers.SerializerMethodField()

    class Meta:
        model = AccountRequest
        fields = ["id", "patient", "patient_name", "account", "request_type", "account_type", "amount",
                  "payment_method", "reference", "notes", "status", "requested_by", "requested_by_name",
                  "reviewed_by", "reviewed_at", "rejection_reason", "created_at"]
        read_only_fields = fields

    def get_requested_by_name(self, obj):
        return obj.requested_by.fullname if obj.requested_by_id else ""


class AccountRequestCreateSerializer(serializers.Serializer):
    patient = serializers.CharField()
    request_type = serializers.ChoiceField(choices=RequestType.choices)
    account_type = serializers.ChoiceField(choices=AccountType.choices, required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)


class AccountStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AccountStatus.choices)
