from rest_framework import serializers

from .enums import ReviewAction
from .models import Loan


class LoanSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source="staff.fullname", read_only=True)
    staff_role = serializers.CharField(source="staff.role", read_only=True)

    class Meta:
        model = Loan
        fields = ["id", "staff", "staff_name", "staff_role", "amount", "reason", "status",
                  "approved_amount", "review_notes", "reviewed_by", "reviewed_at",
                  "disbursed_by", "disbursed_at", "created_at"]
        read_only_fields = fields


class LoanRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class LoanReviewSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=ReviewAction.choices)
    approved_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
