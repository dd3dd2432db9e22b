"""
Django admin configuration for sales models.

Sales are immutable, so their admin pages are read-only.
"""

from django.contrib import admin

from .models import Sale, SaleItem, StockReservation


class SaleItemInline(admin.TabularInline):
    """Inline admin for SaleItem model."""

    model = SaleItem
    extra = 0
    can_delete = False
    fields = ["product", "name", "quantity", "unit_price", "vat_rate", "line_total"]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    """Admin interface for Sale model."""

    list_display = [
        "id",
        "store",
        "user",
        "total",
        "total_vat",
        "payment_method",
        "created_at",
    ]
    list_filter = ["payment_method", "store", "created_at"]
    search_fields = ["id", "store__name", "user__username"]
    inlines = [SaleItemInline]
    fieldsets = [
        (
            "Basic Information",
            {
                "fields": ["id", "store", "user", "created_at"],
            },
        ),
        (
            "Amounts",
            {
                "fields": ["total", "net_amount", "total_vat", "vat_breakdown"],
            },
        ),
        (
            "Payment",
            {
                "fields": ["payment_method", "amount_tendered", "change_due"],
            },
        ),
        (
            "Customer",
            {
                "fields": ["customer_info"],
                "classes": ["collapse"],
            },
        ),
    ]

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockReservation)
class StockReservationAdmin(admin.ModelAdmin):
    """Admin interface for StockReservation model."""

    list_display = ["id", "product", "store", "quantity", "status", "expires_at", "sale"]
    list_filter = ["status", "store", "created_at"]
    search_fields = ["product__name", "sale__id"]
    readonly_fields = [
        "id",
        "product",
        "store",
        "quantity",
        "status",
        "expires_at",
        "sale",
        "created_at",
        "updated_at",
    ]

    def has_add_permission(self, request):
        return False
