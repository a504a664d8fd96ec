from django.contrib import admin
from .models import Loan

@admin.register(Loan)
class LoanAdmin(admin.ModelAdmin):
    list_display = ("id","staff","amount","approved_amount","status","reviewed_by","disbursed_at","created_at")
    list_filter = ("status",)
    search_fields = ("staff__email","staff__first_name","staff__last_name")
