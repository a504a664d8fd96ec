from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "verb", "message", "actor_email", "target_ct", "target_id")
    list_filter = ("verb", "target_ct")
    search_fields = ("actor_email", "message", "target_id")
    date_hierarchy = "created_at"
    list_select_related = ("target_ct",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
