from django.contrib import admin
from .models import Assignment

@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("id","visit","kind","staff","service","status","created_at","completed_at")
    list_filter = ("kind","status")
    search_fields = ("visit__visit_uid","staff__email","service__code")
    raw_id_fields = ("visit","billing","billing_line")
