# orders/admin.py

from django.contrib import admin

from orders.models import Order, OrderStatusHistory


class StatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    can_delete = False
    readonly_fields = ("status", "changed_by", "note", "timestamp")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "barcode",
        "customer_name",
        "status",
        "amount",
        "balance_amount",
        "payment_status",
        "created_at",
    )
    list_filter = ("status", "payment_status")
    search_fields = ("order_number", "barcode", "customer_name", "phone_number")
    readonly_fields = (
        "order_number",
        "barcode",
        "subtotal",
        "balance_amount",
        "payment_status",
        "tracking_link",
        "sms_sent",
        "sms_sent_at",
        "delivery_date",
        "created_at",
        "updated_at",
    )
    inlines = [StatusHistoryInline]
