import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.conf import settings
from django.db import migrations, models

import apps.sales.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        ("inventory", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=apps.sales.models.generate_sale_id,
                        editable=False,
                        help_text="Unique sale identifier (sale_<timestamp>_<random>)",
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "total",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Gross total paid (VAT included)",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "net_amount",
                    models.DecimalField(
                        decimal_places=2, help_text="Total excluding VAT", max_digits=12
                    ),
                ),
                (
                    "total_vat",
                    models.DecimalField(
                        decimal_places=2, help_text="VAT contained in the total", max_digits=12
                    ),
                ),
                (
                    "vat_breakdown",
                    models.JSONField(
                        default=dict,
                        help_text=(
                            'Net and VAT per rate, e.g. {"21.00": {"net": "100.00", "vat": "21.00"}}'
                        ),
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("cash", "Cash"), ("card", "Card")],
                        help_text="Payment method label (no gateway integration)",
                        max_length=10,
                    ),
                ),
                (
                    "amount_tendered",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Cash handed over by the customer",
                        max_digits=12,
                        null=True,
                    ),
                ),
                (
                    "change_due",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Change returned to the customer",
                        max_digits=12,
                        null=True,
                    ),
                ),
                (
                    "customer_info",
                    models.JSONField(
                        blank=True,
                        help_text="Optional customer details: name, phone, email",
                        null=True,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        help_text="When the sale was committed",
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        help_text="Store where the sale was made",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to="core.store",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="User who processed the sale",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales_processed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Sale",
                "verbose_name_plural": "Sales",
                "db_table": "sales",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["store", "-created_at"], name="sale_store_date_idx"),
                    models.Index(fields=["user", "-created_at"], name="sale_user_date_idx"),
                    models.Index(
                        fields=["store", "payment_method"], name="sale_store_payment_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "name",
                    models.CharField(help_text="Product name at time of sale", max_length=255),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        help_text="Quantity sold",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Gross unit price at time of sale",
                        max_digits=12,
                    ),
                ),
                (
                    "vat_rate",
                    models.DecimalField(
                        decimal_places=2, help_text="VAT rate applied, as percentage", max_digits=5
                    ),
                ),
                (
                    "line_total",
                    models.DecimalField(
                        decimal_places=2, help_text="unit_price x quantity", max_digits=12
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        help_text="Product that was sold",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sale_items",
                        to="inventory.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        help_text="Sale that this item belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "verbose_name": "Sale Item",
                "verbose_name_plural": "Sale Items",
                "db_table": "sale_items",
                "ordering": ["id"],
                "indexes": [models.Index(fields=["product"], name="saleitem_product_idx")],
            },
        ),
        migrations.CreateModel(
            name="StockReservation",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the reservation",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        help_text="Units requested",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("REQUESTED", "Requested"),
                            ("RESERVED", "Reserved"),
                            ("COMMITTED", "Committed"),
                            ("RELEASED", "Released"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="REQUESTED",
                        help_text="Current state of the reservation",
                        max_length=50,
                    ),
                ),
                (
                    "expires_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When an uncommitted reservation is released automatically",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        help_text="Product being held",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to="inventory.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        blank=True,
                        help_text="Sale that consumed the reserved units",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reservations",
                        to="sales.sale",
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        help_text="Store of the checkout",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_reservations",
                        to="core.store",
                    ),
                ),
            ],
            options={
                "verbose_name": "Stock Reservation",
                "verbose_name_plural": "Stock Reservations",
                "db_table": "stock_reservations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["product", "status"], name="resv_product_status_idx"),
                    models.Index(fields=["status", "expires_at"], name="resv_status_expiry_idx"),
                ],
            },
        ),
    ]
