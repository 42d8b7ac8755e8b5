# customers/admin.py

from django.contrib import admin

from customers.models import Customer, CustomerMeasurementHistory


class MeasurementHistoryInline(admin.TabularInline):
    model = CustomerMeasurementHistory
    extra = 0
    can_delete = False
    readonly_fields = ("measurements", "updated_by", "notes", "updated_at")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "total_orders", "total_spent", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "phone", "email")
    readonly_fields = ("total_orders", "total_spent", "created_at", "updated_at")
    inlines = [MeasurementHistoryInline]
