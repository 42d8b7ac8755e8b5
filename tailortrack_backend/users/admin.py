# users/admin.py

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

User = get_user_model()


@admin.register(User)
class AccountAdmin(DjangoUserAdmin):
    ordering = ("-created_at",)
    list_display = ("email", "full_name", "role", "phone", "has_customer_profile", "is_active", "last_login")
    list_filter = ("role", "is_active")
    search_fields = ("email", "username", "first_name", "last_name", "phone")
    readonly_fields = ("last_login", "created_at", "updated_at")
    actions = ["deactivate_accounts"]

    fieldsets = (
        (None, {"fields": ("email", "username", "password")}),
        ("Contact", {"fields": ("first_name", "last_name", "phone")}),
        ("Access", {"fields": ("role", "is_active", "is_staff", "is_superuser")}),
        ("Activity", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "phone", "password1", "password2", "role"),
            },
        ),
    )

    @admin.display(boolean=True, description="Customer profile")
    def has_customer_profile(self, obj):
        return hasattr(obj, "customer_profile")

    @admin.action(description="Deactivate selected accounts")
    def deactivate_accounts(self, request, queryset):
        updated = queryset.exclude(pk=request.user.pk).update(is_active=False)
        self.message_user(request, f"{updated} account(s) deactivated")
