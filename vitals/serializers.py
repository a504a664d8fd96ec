from rest_framework import serializers
from .models import VitalSign

MEASURE_FIELDS = [
    "systolic","diastolic","heart_rate","temp_c","resp_rate","spo2","pain_score","blood_sugar",
    "weight_kg","height_cm",
]

class VitalSignSerializer(serializers.ModelSerializer):
    class Meta:
        model = VitalSign
        fields = [
            "id","patient","visit","kind","recorded_by","measured_at",
            *MEASURE_FIELDS, "bmi",
            "bp_flag","temp_flag","spo2_flag","overall",
            "chief_complaint","notes","created_at",
        ]
        read_only_fields = ["patient","visit","kind","recorded_by","bmi","bp_flag","temp_flag","spo2_flag","overall","created_at"]

class VitalSignInputSerializer(serializers.ModelSerializer):
    """Measurements only; patient/visit come from the URL or body and are resolved by the view."""
    measured_at = serializers.DateTimeField(required=False)
    class Meta:
        model = VitalSign
        fields = ["measured_at", *MEASURE_FIELDS, "chief_complaint", "notes"]

class TriageVitalsSerializer(VitalSignInputSerializer):
    visit = serializers.IntegerField()
    class Meta(VitalSignInputSerializer.Meta):
        fields = ["visit", *VitalSignInputSerializer.Meta.fields]

class ContinuousVitalsSerializer(VitalSignInputSerializer):
    patient = serializers.CharField()
    visit = serializers.IntegerField(required=False, allow_null=True)
    class Meta(VitalSignInputSerializer.Meta):
        fields = ["patient", "visit", *VitalSignInputSerializer.Meta.fields]

class VitalSignListSerializer(serializers.ModelSerializer):
    class Meta:
        model = VitalSign
        fields = [
            "id","patient","visit","kind","measured_at","systolic","diastolic","heart_rate",
            "temp_c","resp_rate","spo2","bmi","overall"
        ]

class VitalSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    green = serializers.IntegerField()
    yellow = serializers.IntegerField()
    red = serializers.IntegerField()
    latest_overall = serializers.CharField(allow_null=True)
