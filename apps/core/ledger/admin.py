from django.contrib import admin

from .models import Fee, Payment, ReceiptCounter


class LedgerRecordAdmin(admin.ModelAdmin):
    """Browse-only admin: ledger rows change through the ledger services."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(LedgerRecordAdmin):
    list_display = ('receipt_number', 'member', 'amount', 'payment_date', 'payment_method', 'recorded_by')
    list_filter = ('payment_method', 'payment_date')
    search_fields = ('receipt_number', 'member_name', 'reference')


@admin.register(Fee)
class FeeAdmin(LedgerRecordAdmin):
    list_display = ('member', 'fee_year', 'category_name', 'amount', 'applied_date', 'applied_by')
    list_filter = ('fee_year', 'category_id')
    search_fields = ('member_name', 'category_name', 'notes')


@admin.register(ReceiptCounter)
class ReceiptCounterAdmin(LedgerRecordAdmin):
    list_display = ('year', 'last_number', 'updated_at')
