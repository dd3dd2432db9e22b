"""
Inventory models for retail store management.

Products are owned by a single store. Their tax-inclusive price and VAT
rate drive the sale engine; their stock is only moved by the stock guard
in apps.sales.stock_guard.
"""

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q

from apps.core.models import Store


class ProductQuerySet(models.QuerySet):
    """Query helpers for store catalogs."""

    def active(self):
        return self.filter(is_active=True)

    def for_store(self, store_id):
        return self.filter(store_id=store_id)

    def search(self, term):
        """Match name or barcode, case-insensitively."""
        if not term:
            return self
        return self.filter(Q(name__icontains=term) | Q(barcode__icontains=term))

    def low_stock(self, threshold):
        return self.annotate(available=F("stock") - F("reserved")).filter(available__lte=threshold)


class Product(models.Model):
    """
    A sellable product in one store's catalog.

    `gross_price` is the price shown to the customer (VAT included) and
    `vat_rate` is a percentage, so 21.00 means 21 %. `reserved` counts the
    units held by open stock reservations; they are still part of `stock`
    until the owning sale is committed.
    """

    name = models.CharField(max_length=255, help_text="Product name")

    description = models.TextField(blank=True, help_text="Product description")

    category = models.CharField(
        max_length=100,
        blank=True,
        help_text="Category label used to filter the POS grid",
    )

    barcode = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Barcode for quick scanning",
    )

    gross_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Selling price including VAT",
    )

    vat_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("21.00"),
        validators=[MinValueValidator(Decimal("0.00")), MaxValueValidator(Decimal("100.00"))],
        help_text="VAT rate as percentage (e.g., 21.00 for 21%)",
    )

    stock = models.PositiveIntegerField(
        default=0,
        help_text="Units physically in stock",
    )

    reserved = models.PositiveIntegerField(
        default=0,
        help_text="Units held by open checkouts",
    )

    store = models.ForeignKey(
        Store,
        on_delete=models.PROTECT,
        related_name="products",
        help_text="Store that owns this product",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Inactive products stay on historical sales but cannot be sold",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        db_table = "products"
        ordering = ["name"]
        verbose_name = "Product"
        verbose_name_plural = "Products"
        unique_together = [["store", "barcode"]]
        indexes = [
            models.Index(fields=["store", "is_active"], name="product_store_active_idx"),
            models.Index(fields=["store", "category"], name="product_store_category_idx"),
            models.Index(fields=["barcode"], name="product_barcode_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(reserved__lte=F("stock")),
                name="product_reserved_lte_stock",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.store.name})"

    @property
    def available_stock(self):
        """Units that can still be put in a cart."""
        return self.stock - self.reserved

    def is_out_of_stock(self):
        return self.available_stock <= 0

    def is_low_stock(self, threshold):
        return self.available_stock <= threshold
