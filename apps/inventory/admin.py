"""
Admin configuration for inventory models.
"""

from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for Product."""

    list_display = [
        "name",
        "category",
        "barcode",
        "gross_price",
        "vat_rate",
        "stock",
        "reserved",
        "store",
        "is_active",
    ]
    list_filter = ["is_active", "store", "category", "vat_rate"]
    search_fields = ["name", "barcode", "description"]
    # Stock only moves through sales and stock reservations
    readonly_fields = ["reserved", "created_at", "updated_at"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("store", "name", "category", "barcode", "description", "is_active"),
            },
        ),
        (
            "Pricing",
            {
                "fields": ("gross_price", "vat_rate"),
            },
        ),
        (
            "Stock",
            {
                "fields": ("stock", "reserved"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )
