"""
Django admin configuration for core models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from apps.core.audit_models import AuditLog

from .models import Company, Store, User


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    """Admin interface for Company model."""

    list_display = ["name", "slug", "status", "created_at", "updated_at"]
    list_filter = ["status", "created_at"]
    search_fields = ["name", "slug", "vat_number", "id"]
    readonly_fields = ["id", "created_at", "updated_at"]

    fieldsets = (
        ("Basic Information", {"fields": ("id", "name", "slug", "vat_number")}),
        ("Status", {"fields": ("status",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    ordering = ["name"]

    def get_readonly_fields(self, request, obj=None):
        """Make slug readonly when editing existing company."""
        if obj:
            return self.readonly_fields + ["slug"]
        return self.readonly_fields


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    """Admin interface for Store model."""

    list_display = ["name", "company", "phone", "is_active", "created_at"]
    list_filter = ["is_active", "created_at", "company"]
    search_fields = ["name", "address", "phone", "company__name"]
    readonly_fields = ["id", "created_at", "updated_at"]

    fieldsets = (
        ("Basic Information", {"fields": ("id", "company", "name")}),
        ("Contact Information", {"fields": ("address", "phone")}),
        ("Status", {"fields": ("is_active",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    ordering = ["company", "name"]

    def get_queryset(self, request):
        """Optimize queryset with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related("company")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for User model."""

    list_display = ["username", "email", "role", "company", "store", "is_active"]
    list_filter = ["role", "is_active", "is_staff", "company"]
    search_fields = ["username", "email", "first_name", "last_name", "company__name"]
    readonly_fields = ["date_joined", "last_login"]

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        ("Personal Information", {"fields": ("first_name", "last_name", "email", "phone")}),
        ("Company & Role", {"fields": ("company", "role", "store")}),
        (
            "Permissions",
            {
                "fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions"),
                "classes": ("collapse",),
            },
        ),
        ("Important Dates", {"fields": ("last_login", "date_joined"), "classes": ("collapse",)}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "username",
                    "password1",
                    "password2",
                    "email",
                    "company",
                    "role",
                    "store",
                ),
            },
        ),
    )

    ordering = ["username"]

    def get_queryset(self, request):
        """Optimize queryset with select_related."""
        qs = super().get_queryset(request)
        return qs.select_related("company", "store")


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only admin interface for audit logs."""

    list_display = ["timestamp", "category", "action", "severity", "user", "store"]
    list_filter = ["category", "action", "severity", "timestamp"]
    search_fields = ["user__username", "company__name", "store__name", "description", "object_id"]
    readonly_fields = [field.name for field in AuditLog._meta.fields]
    ordering = ["-timestamp"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
