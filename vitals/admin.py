from django.contrib import admin
from .models import VitalSign

@admin.register(VitalSign)
class VitalSignAdmin(admin.ModelAdmin):
    list_display = ("patient","visit","kind","measured_at","systolic","diastolic","temp_c","spo2","overall","created_at")
    list_filter  = ("kind","overall")
    search_fields = ("patient__id","patient__first_name","patient__last_name","visit__visit_uid")
