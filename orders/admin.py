from django.contrib import admin
from .models import Order, OrderBatch, ResultTemplate

@admin.register(ResultTemplate)
class ResultTemplateAdmin(admin.ModelAdmin):
    list_display = ("code","name","category","order_type","is_active")
    list_filter = ("order_type","is_active")
    search_fields = ("code","name")
    filter_horizontal = ("services",)

class OrderInline(admin.TabularInline):
    model = Order
    extra = 0
    fields = ("service","status","completed_at")
    readonly_fields = fields
    can_delete = False

@admin.register(OrderBatch)
class OrderBatchAdmin(admin.ModelAdmin):
    list_display = ("id","visit","order_type","billing","ordered_by","created_at")
    list_filter = ("order_type",)
    inlines = [OrderInline]

@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id","visit","order_type","service","status","created_at","completed_at")
    list_filter = ("order_type","status")
    search_fields = ("visit__visit_uid","patient__id","service__code")
