from django.contrib import admin
from .models import Billing, BillingLine, Payment, Service

@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("code","name","category","price","is_active")
    list_filter = ("category","is_active")
    search_fields = ("code","name")

class BillingLineInline(admin.TabularInline):
    model = BillingLine
    extra = 0
    readonly_fields = ("service","description","quantity","unit_price","total_price")
    can_delete = False

class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    readonly_fields = ("amount","method","reference","bank_name","insurer","received_by","received_at")
    can_delete = False

@admin.register(Billing)
class BillingAdmin(admin.ModelAdmin):
    list_display = ("id","patient","visit","kind","status","total_amount","created_at","paid_at")
    list_filter = ("kind","status")
    search_fields = ("patient__id","patient__first_name","patient__last_name","visit__visit_uid")
    readonly_fields = ("total_amount","status","paid_at","insurance_settled_at")
    inlines = [BillingLineInline, PaymentInline]

@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id","billing","patient","amount","method","reference","received_by","received_at")
    list_filter = ("method",)
