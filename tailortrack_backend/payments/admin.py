# payments/admin.py

from django.contrib import admin

from payments.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("order", "amount", "payment_method", "payment_status", "payment_date")
    list_filter = ("payment_method", "payment_status")
    search_fields = ("order__barcode", "order__order_number", "gateway_payment_id", "transaction_id")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
