from django.contrib import admin
from .models import IdentifierSequence, Patient

@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ("id","first_name","last_name","mobile","patient_type","card_status","status","created_at")
    list_filter = ("patient_type","card_status","status")
    search_fields = ("id","first_name","last_name","mobile","email")

@admin.register(IdentifierSequence)
class IdentifierSequenceAdmin(admin.ModelAdmin):
    list_display = ("key","last_value")
    readonly_fields = ("key","last_value")
