from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .capabilities import capabilities_for
from .models import User

class StaffCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)
    class Meta:
        model = User
        fields = ["id","email","password","first_name","last_name","role","phone",
                  "specialty","is_available","consultation_fee"]

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated):
        pwd = validated.pop("password")
        return User.objects.create_user(password=pwd, **validated)

class StaffSerializer(serializers.ModelSerializer):
    fullname = serializers.CharField(read_only=True)
    class Meta:
        model = User
        fields = ["id","email","first_name","last_name","fullname","role","phone",
                  "specialty","is_available","consultation_fee","is_active"]

class MeSerializer(StaffSerializer):
    capabilities = serializers.SerializerMethodField()
    class Meta(StaffSerializer.Meta):
        fields = StaffSerializer.Meta.fields + ["capabilities"]

    def get_capabilities(self, obj):
        return capabilities_for(obj.role)

class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    def validate(self, data):
        user = authenticate(email=data["email"], password=data["password"])
        if not user:
            raise serializers.ValidationError("Invalid credentials")
        data["user"] = user
        return data
