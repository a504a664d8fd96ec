from django.contrib import admin
from .models import Appointment

@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id","patient","doctor","appt_type","status","start_at","visit","created_at")
    list_filter = ("status","appt_type")
    search_fields = ("patient__id","patient__first_name","patient__last_name","reason")
    list_select_related = ("patient","doctor","visit")
