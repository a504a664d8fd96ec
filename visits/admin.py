from django.contrib import admin
from .models import Visit, VisitTransition

class VisitTransitionInline(admin.TabularInline):
    model = VisitTransition
    extra = 0
    can_delete = False
    readonly_fields = ("from_status","to_status","actor","reason","created_at")

@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ("visit_uid","patient","status","is_emergency","created_at","completed_at")
    list_filter = ("status","is_emergency")
    search_fields = ("visit_uid","patient__id","patient__first_name","patient__last_name")
    # status only moves through the workflow services
    readonly_fields = ("visit_uid","status","completed_at","cancelled_at")
    inlines = [VisitTransitionInline]
