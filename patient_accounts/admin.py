from django.contrib import admin
from .models import AccountRequest, AccountTransaction, PatientAccount

class AccountTransactionInline(admin.TabularInline):
    model = AccountTransaction
    extra = 0
    readonly_fields = ("type","amount","balance_before","balance_after","billing","request","processed_by","created_at")
    can_delete = False

@admin.register(PatientAccount)
class PatientAccountAdmin(admin.ModelAdmin):
    list_display = ("id","patient","account_type","status","balance","debt_owed","updated_at")
    list_filter = ("account_type","status")
    search_fields = ("patient__id","patient__first_name","patient__last_name")
    readonly_fields = ("balance","debt_owed","total_deposited","total_used","total_debt_paid")
    inlines = [AccountTransactionInline]

@admin.register(AccountRequest)
class AccountRequestAdmin(admin.ModelAdmin):
    list_display = ("id","patient","request_type","amount","status","requested_by","reviewed_by","created_at")
    list_filter = ("request_type","status")
    search_fields = ("patient__id","reference")
