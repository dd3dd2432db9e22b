"""
Stock guard: the only code that moves product stock.

Checkout holds units with `reserve()`, deducts them with `commit()` once
the sale is being written, and hands them back with `release()` when the
checkout fails. Every counter change is a conditional UPDATE on the
product row, so two checkouts can never both take the last unit:

    UPDATE products SET reserved = reserved + n
     WHERE id = ? AND stock >= reserved + n

On PostgreSQL the row is additionally locked with SELECT ... FOR UPDATE.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.inventory.models import Product

from .exceptions import InsufficientStock, ProductNotFound, ReservationError, ValidationError
from .models import StockReservation

logger = logging.getLogger(__name__)


class StockGuard:
    """
    Reserve, commit and release stock for a checkout.

    Args:
        ttl_seconds: Lifetime of an uncommitted reservation
            (defaults to settings.POS_RESERVATION_TTL_SECONDS)
    """

    def __init__(self, ttl_seconds=None):
        if ttl_seconds is None:
            ttl_seconds = settings.POS_RESERVATION_TTL_SECONDS
        self.ttl = timedelta(seconds=ttl_seconds)

    def reserve(self, store_id, product_id, qty):
        """
        Hold `qty` units of a product against the current database row.

        Returns:
            StockReservation: in RESERVED state

        Raises:
            ProductNotFound: product missing, inactive or of another store
            InsufficientStock: not enough unreserved stock; a REJECTED
                reservation is kept for auditing
        """
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise ValidationError(f"Quantity must be a positive whole number, got {qty!r}.")

        self.release_expired(product_id=product_id)

        with transaction.atomic():
            try:
                product = Product.objects.select_for_update().get(
                    pk=product_id, store_id=store_id, is_active=True
                )
            except Product.DoesNotExist:
                raise ProductNotFound(product_id, store_id)

            reservation = StockReservation(product=product, store_id=store_id, quantity=qty)
            updated = Product.objects.filter(
                pk=product.pk, stock__gte=F("reserved") + qty
            ).update(reserved=F("reserved") + qty)

            if updated:
                reservation.hold(expires_at=timezone.now() + self.ttl)
                reservation.save()
                logger.debug(f"Reserved {qty} x {product.name} ({reservation.id})")
                return reservation

            product.refresh_from_db(fields=["stock", "reserved"])
            reservation.reject()
            reservation.save()

        logger.warning(
            f"Reservation rejected for {product.name}: "
            f"requested {qty}, available {product.available_stock}"
        )
        raise InsufficientStock(
            product.pk, product.name, requested=qty, available=product.available_stock
        )

    def commit(self, reservation, sale=None):
        """
        Deduct the held units from stock and mark the reservation COMMITTED.

        Must run inside the transaction that writes the sale so both are
        rolled back together.

        Raises:
            ReservationError: the reservation is no longer RESERVED
        """
        with transaction.atomic():
            locked = self._lock(reservation)
            if locked.status != StockReservation.RESERVED:
                raise ReservationError(
                    f"Reservation {locked.id} cannot be committed from {locked.status}.",
                    product_id=locked.product_id,
                )

            updated = Product.objects.filter(
                pk=locked.product_id,
                stock__gte=locked.quantity,
                reserved__gte=locked.quantity,
            ).update(
                stock=F("stock") - locked.quantity,
                reserved=F("reserved") - locked.quantity,
            )
            if not updated:
                raise ReservationError(
                    f"Stock for reservation {locked.id} is no longer held.",
                    product_id=locked.product_id,
                )

            locked.commit(sale=sale)
            locked.save()
        return locked

    def release(self, reservation):
        """
        Give the held units back. Releasing twice, or releasing a rejected
        reservation, is a no-op.

        Raises:
            ReservationError: the reservation was already committed
        """
        with transaction.atomic():
            locked = self._lock(reservation)
            if locked.status in (StockReservation.RELEASED, StockReservation.REJECTED):
                return locked
            if locked.status != StockReservation.RESERVED:
                raise ReservationError(
                    f"Reservation {locked.id} cannot be released from {locked.status}."
                )

            Product.objects.filter(
                pk=locked.product_id, reserved__gte=locked.quantity
            ).update(reserved=F("reserved") - locked.quantity)

            locked.release()
            locked.save()

        logger.debug(f"Released reservation {locked.id}")
        return locked

    def release_expired(self, product_id=None, now=None):
        """
        Release reservations past their expiry.

        Args:
            product_id: Limit the sweep to one product (optional)
            now: Reference time (defaults to timezone.now())

        Returns:
            int: Number of reservations released
        """
        from apps.core.audit import log_reservation_expired

        expired = StockReservation.objects.expired(now)
        if product_id is not None:
            expired = expired.filter(product_id=product_id)

        released = 0
        for reservation in expired.select_related("product", "store"):
            # A concurrent commit may have won the row in the meantime
            try:
                reservation = self.release(reservation)
            except ReservationError:
                continue
            if reservation.status == StockReservation.RELEASED:
                log_reservation_expired(reservation)
                released += 1

        if released:
            logger.info(f"Released {released} expired stock reservations")
        return released

    def _lock(self, reservation):
        return (
            StockReservation.objects.select_for_update()
            .select_related("product", "store")
            .get(pk=reservation.pk)
        )
