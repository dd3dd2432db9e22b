"""
Sales models for the retail POS.

- Sale: immutable record of a committed checkout, with its VAT snapshot
- SaleItem: cart line snapshotted at checkout time
- StockReservation: units held for an in-flight checkout

Sales are written exactly once by apps.sales.services.SaleCommitter and
are never updated afterwards. Stock reservations move through a small
state machine driven by apps.sales.stock_guard.StockGuard.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.crypto import get_random_string
from django_fsm import FSMField, transition

from apps.core.models import Store
from apps.inventory.models import Product

SALE_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"


def generate_sale_id():
    """Return a new sale id such as `sale_1718000000000_k3j9x0a1b`."""
    timestamp = int(timezone.now().timestamp() * 1000)
    return f"sale_{timestamp}_{get_random_string(9, SALE_ID_ALPHABET)}"


class Sale(models.Model):
    """
    A committed point-of-sale transaction.

    Amounts are tax-inclusive: `total` is what the customer paid, split
    into `net_amount` and `total_vat` by the VAT breakdown stored in
    `vat_breakdown` (keyed by rate, e.g. "21.00"). `amount_tendered` and
    `change_due` are only set for cash payments.
    """

    CASH = "cash"
    CARD = "card"

    PAYMENT_METHOD_CHOICES = [
        (CASH, "Cash"),
        (CARD, "Card"),
    ]

    id = models.CharField(
        primary_key=True,
        max_length=64,
        default=generate_sale_id,
        editable=False,
        help_text="Unique sale identifier (sale_<timestamp>_<random>)",
    )

    store = models.ForeignKey(
        Store,
        on_delete=models.PROTECT,
        related_name="sales",
        help_text="Store where the sale was made",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales_processed",
        help_text="User who processed the sale",
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Gross total paid (VAT included)",
    )

    net_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Total excluding VAT",
    )

    total_vat = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="VAT contained in the total",
    )

    vat_breakdown = models.JSONField(
        default=dict,
        help_text='Net and VAT per rate, e.g. {"21.00": {"net": "100.00", "vat": "21.00"}}',
    )

    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHOD_CHOICES,
        help_text="Payment method label (no gateway integration)",
    )

    amount_tendered = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Cash handed over by the customer",
    )

    change_due = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Change returned to the customer",
    )

    customer_info = models.JSONField(
        null=True,
        blank=True,
        help_text="Optional customer details: name, phone, email",
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the sale was committed",
    )

    class Meta:
        db_table = "sales"
        ordering = ["-created_at"]
        verbose_name = "Sale"
        verbose_name_plural = "Sales"
        indexes = [
            models.Index(fields=["store", "-created_at"], name="sale_store_date_idx"),
            models.Index(fields=["user", "-created_at"], name="sale_user_date_idx"),
            models.Index(fields=["store", "payment_method"], name="sale_store_payment_idx"),
        ]

    def __str__(self):
        return f"{self.id} - {self.total}"

    def save(self, *args, **kwargs):
        """Sales are written once. Saving an existing sale raises."""
        if not self._state.adding:
            raise ValueError(f"Sale {self.id} is immutable and cannot be modified")
        super().save(*args, **kwargs)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items.all())

    def to_record(self):
        """Serializable snapshot of the sale, as exposed to clients and the audit log."""
        record = {
            "id": self.id,
            "total": str(self.total),
            "net_amount": str(self.net_amount),
            "total_vat": str(self.total_vat),
            "vat_breakdown": self.vat_breakdown,
            "payment_method": self.payment_method,
            "items": [item.to_record() for item in self.items.all()],
            "store_id": str(self.store_id),
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
        }
        if self.customer_info:
            record["customer_info"] = self.customer_info
        if self.payment_method == self.CASH:
            record["amount_tendered"] = str(self.amount_tendered)
            record["change_due"] = str(self.change_due)
        return record


class SaleItem(models.Model):
    """
    A sold line, snapshotted from the cart.

    `name`, `unit_price` and `vat_rate` are copies taken at checkout, so
    later catalog edits never change a historical sale. The product link
    is kept for reporting only.
    """

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Sale that this item belongs to",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sale_items",
        help_text="Product that was sold",
    )

    name = models.CharField(max_length=255, help_text="Product name at time of sale")

    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Quantity sold",
    )

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Gross unit price at time of sale",
    )

    vat_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        help_text="VAT rate applied, as percentage",
    )

    line_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="unit_price x quantity",
    )

    class Meta:
        db_table = "sale_items"
        ordering = ["id"]
        verbose_name = "Sale Item"
        verbose_name_plural = "Sale Items"
        indexes = [
            models.Index(fields=["product"], name="saleitem_product_idx"),
        ]

    def __str__(self):
        return f"{self.name} x {self.quantity}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Sale items are immutable and cannot be modified")
        super().save(*args, **kwargs)

    def to_record(self):
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "vat_rate": str(self.vat_rate),
            "quantity": self.quantity,
        }


class StockReservationQuerySet(models.QuerySet):
    def open(self):
        return self.filter(status=StockReservation.RESERVED)

    def expired(self, now=None):
        return self.open().filter(expires_at__lte=now or timezone.now())


class StockReservation(models.Model):
    """
    Units of a product held for a checkout in progress.

    Lifecycle:
        REQUESTED -> RESERVED -> COMMITTED (stock deducted, linked to the sale)
                             \\-> RELEASED (units handed back, e.g. on failure or expiry)
        REQUESTED -> REJECTED (not enough stock; kept for auditing)

    Transition methods only change `status`; StockGuard adjusts the
    product counters and saves.
    """

    REQUESTED = "REQUESTED"
    RESERVED = "RESERVED"
    COMMITTED = "COMMITTED"
    RELEASED = "RELEASED"
    REJECTED = "REJECTED"

    STATUS_CHOICES = [
        (REQUESTED, "Requested"),
        (RESERVED, "Reserved"),
        (COMMITTED, "Committed"),
        (RELEASED, "Released"),
        (REJECTED, "Rejected"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the reservation",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="reservations",
        help_text="Product being held",
    )

    store = models.ForeignKey(
        Store,
        on_delete=models.CASCADE,
        related_name="stock_reservations",
        help_text="Store of the checkout",
    )

    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Units requested",
    )

    status = FSMField(
        default=REQUESTED,
        choices=STATUS_CHOICES,
        help_text="Current state of the reservation",
    )

    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When an uncommitted reservation is released automatically",
    )

    sale = models.ForeignKey(
        Sale,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservations",
        help_text="Sale that consumed the reserved units",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockReservationQuerySet.as_manager()

    class Meta:
        db_table = "stock_reservations"
        ordering = ["-created_at"]
        verbose_name = "Stock Reservation"
        verbose_name_plural = "Stock Reservations"
        indexes = [
            models.Index(fields=["product", "status"], name="resv_product_status_idx"),
            models.Index(fields=["status", "expires_at"], name="resv_status_expiry_idx"),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.product_id} ({self.status})"

    def is_expired(self, now=None):
        return (
            self.status == self.RESERVED
            and self.expires_at is not None
            and self.expires_at <= (now or timezone.now())
        )

    @transition(field=status, source=REQUESTED, target=RESERVED)
    def hold(self, expires_at):
        """Units were set aside on the product row."""
        self.expires_at = expires_at

    @transition(field=status, source=REQUESTED, target=REJECTED)
    def reject(self):
        """Not enough unreserved stock."""

    @transition(field=status, source=RESERVED, target=COMMITTED)
    def commit(self, sale=None):
        """Held units were deducted from stock."""
        self.sale = sale

    @transition(field=status, source=RESERVED, target=RELEASED)
    def release(self):
        """Held units were handed back."""
