from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(help_text="Product name", max_length=255)),
                ("description", models.TextField(blank=True, help_text="Product description")),
                (
                    "category",
                    models.CharField(
                        blank=True,
                        help_text="Category label used to filter the POS grid",
                        max_length=100,
                    ),
                ),
                (
                    "barcode",
                    models.CharField(
                        blank=True,
                        help_text="Barcode for quick scanning",
                        max_length=50,
                        null=True,
                    ),
                ),
                (
                    "gross_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Selling price including VAT",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "vat_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("21.00"),
                        help_text="VAT rate as percentage (e.g., 21.00 for 21%)",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00")),
                            django.core.validators.MaxValueValidator(Decimal("100.00")),
                        ],
                    ),
                ),
                (
                    "stock",
                    models.PositiveIntegerField(default=0, help_text="Units physically in stock"),
                ),
                (
                    "reserved",
                    models.PositiveIntegerField(default=0, help_text="Units held by open checkouts"),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Inactive products stay on historical sales but cannot be sold",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "store",
                    models.ForeignKey(
                        help_text="Store that owns this product",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="products",
                        to="core.store",
                    ),
                ),
            ],
            options={
                "verbose_name": "Product",
                "verbose_name_plural": "Products",
                "db_table": "products",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["store", "is_active"], name="product_store_active_idx"),
                    models.Index(fields=["store", "category"], name="product_store_category_idx"),
                    models.Index(fields=["barcode"], name="product_barcode_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("reserved__lte", models.F("stock"))),
                        name="product_reserved_lte_stock",
                    )
                ],
                "unique_together": {("store", "barcode")},
            },
        ),
    ]
