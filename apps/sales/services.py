"""
Sale committer: turns a validated cart into a persisted sale.

Checkout is all-or-nothing. Every line is reserved first; if any line
cannot be reserved, the reservations already taken are released and no
stock moves. The sale rows and the stock deductions are then written in
one transaction, and the audit entry and analytics invalidation run only
after that transaction has committed.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import DatabaseError, transaction

from apps.core.audit import log_checkout_failure, log_sale_created

from .analytics import AnalyticsAggregator
from .exceptions import (
    EmptyCart,
    InsufficientPayment,
    InsufficientStock,
    ReservationError,
    SalePersistenceError,
    StockError,
    ValidationError,
    to_decimal,
)
from .models import Sale, SaleItem
from .stock_guard import StockGuard
from .tax import quantize_money
from .vat import decompose

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("name", "phone", "email")


@dataclass(frozen=True)
class CheckoutResult:
    sale: Sale
    change: Decimal


def normalize_payment_method(method):
    value = str(method or "").strip().lower()
    if value not in (Sale.CASH, Sale.CARD):
        raise ValidationError(f"Unknown payment method: {method!r}")
    return value


def clean_customer_info(customer_info):
    """Keep the known, non-empty customer fields; None when nothing is left."""
    if not customer_info:
        return None
    if not isinstance(customer_info, dict):
        raise ValidationError("Customer info must be an object.")
    cleaned = {
        field: str(customer_info[field]).strip()
        for field in CUSTOMER_FIELDS
        if customer_info.get(field) not in (None, "")
    }
    return cleaned or None


class SaleCommitter:
    """
    Commits carts of one store on behalf of one user.

    Args:
        user: User processing the sale
        store: Store the cart is bound to
        guard: StockGuard (optional)
        analytics: AnalyticsAggregator (optional)
        request: HTTP request, forwarded to the audit log (optional)
    """

    def __init__(self, user, store, guard=None, analytics=None, request=None):
        self.user = user
        self.store = store
        self.guard = guard or StockGuard()
        self.analytics = analytics or AnalyticsAggregator()
        self.request = request

    def checkout(self, cart, payment_method, amount_tendered=None, customer_info=None):
        """
        Persist the cart as a sale and clear it.

        Raises:
            EmptyCart: no lines
            ValidationError: bad payment method, tender or customer info
            InsufficientPayment: cash tendered below the total
            InsufficientStock: a line can no longer be fulfilled
            SalePersistenceError: the sale could not be written
        """
        if cart.is_empty:
            raise EmptyCart()
        if str(cart.store_id) != str(self.store.pk):
            raise ValidationError(
                f"Cart belongs to store {cart.store_id}, not to store {self.store.pk}."
            )

        method = normalize_payment_method(payment_method)
        customer = clean_customer_info(customer_info)
        total = quantize_money(cart.total())

        try:
            tendered, change = self._settle(method, total, amount_tendered)
            reservations = self._reserve_all(cart)
        except (InsufficientPayment, StockError) as e:
            log_checkout_failure(self.user, self.store, e, request=self.request)
            raise

        try:
            breakdown = decompose(cart)
            with transaction.atomic():
                sale = Sale.objects.create(
                    store=self.store,
                    user=self.user,
                    total=total,
                    net_amount=breakdown.net_total,
                    total_vat=breakdown.vat_total,
                    vat_breakdown=breakdown.as_dict()["groups"],
                    payment_method=method,
                    amount_tendered=tendered,
                    change_due=change if method == Sale.CASH else None,
                    customer_info=customer,
                )
                SaleItem.objects.bulk_create(
                    [
                        SaleItem(
                            sale=sale,
                            product_id=line.product_id,
                            name=line.product.name,
                            quantity=line.quantity,
                            unit_price=line.unit_price,
                            vat_rate=line.tax_rate.percent,
                            line_total=line.line_total,
                        )
                        for line in cart
                    ]
                )
                for reservation in reservations:
                    self.guard.commit(reservation, sale=sale)

                transaction.on_commit(lambda: self._after_commit(sale))
        except ReservationError as e:
            self._release_all(reservations)
            line = self._line_for(cart, e)
            logger.warning(f"Checkout aborted, reservation lost: {e}")
            raise InsufficientStock(
                line.product_id, line.product.name, requested=line.quantity, available=0
            ) from e
        except DatabaseError as e:
            self._release_all(reservations)
            logger.error(f"Failed to persist sale for store {self.store.pk}: {e}", exc_info=True)
            raise SalePersistenceError() from e
        except Exception:
            self._release_all(reservations)
            logger.error(f"Checkout failed for store {self.store.pk}, reservations released", exc_info=True)
            raise

        cart.clear()
        logger.info(f"Sale {sale.id} committed: {total} by {method} at {self.store.name}")
        return CheckoutResult(sale=sale, change=change)

    def _settle(self, method, total, amount_tendered):
        """Return (tendered, change) for the payment."""
        if method == Sale.CARD:
            return None, Decimal("0.00")

        if amount_tendered is None or amount_tendered == "":
            raise ValidationError("Amount tendered is required for cash payments.")
        tendered = quantize_money(to_decimal(amount_tendered, field="amount tendered"))
        if tendered < total:
            raise InsufficientPayment(total, tendered)
        return tendered, tendered - total

    def _reserve_all(self, cart):
        reservations = []
        try:
            for line in cart:
                reservations.append(
                    self.guard.reserve(self.store.pk, line.product_id, line.quantity)
                )
        except Exception:
            self._release_all(reservations)
            raise
        return reservations

    def _release_all(self, reservations):
        for reservation in reservations:
            self.guard.release(reservation)

    def _line_for(self, cart, error):
        """The cart line whose reservation failed, or the first line."""
        return cart.get_line(error.product_id) or cart.lines[0]

    def _after_commit(self, sale):
        log_sale_created(sale, request=self.request)
        self.analytics.sale_committed(sale)
