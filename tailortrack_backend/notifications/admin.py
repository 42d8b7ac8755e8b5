# notifications/admin.py

from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "recipient", "is_read", "created_at")
    list_filter = ("type", "is_read")
    search_fields = ("title", "recipient__email")
    readonly_fields = ("recipient", "type", "title", "message", "order", "metadata", "created_at")
