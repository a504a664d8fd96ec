from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("email","role","specialty","is_available","is_active","last_login")
    list_filter = ("role","is_available","is_active")
    search_fields = ("email","first_name","last_name")
    ordering = ("-date_joined",)
    fieldsets = (
        (None, {"fields": ("email","password")}),
        ("Personal info", {"fields": ("first_name","last_name","phone")}),
        ("Clinic", {"fields": ("role","specialty","is_available","consultation_fee")}),
        ("Permissions", {"fields": ("is_active","is_staff","is_superuser","groups","user_permissions")}),
        ("Important dates", {"fields": ("last_login","date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email","role","password1","password2")}),
    )
