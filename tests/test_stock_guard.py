"""
Tests for stock reservations.

Verifies that stock is only ever held, deducted or handed back through
StockGuard and that the reservation state machine is respected.
"""

from datetime import timedelta

from django.utils import timezone

import pytest

from apps.core.audit_models import AuditLog
from apps.sales.exceptions import InsufficientStock, ProductNotFound, ReservationError
from apps.sales.models import StockReservation
from apps.sales.stock_guard import StockGuard


@pytest.mark.django_db
class TestReserve:
    def test_reserve_holds_units(self, make_product, store):
        product = make_product(stock=5)

        reservation = StockGuard().reserve(store.pk, product.pk, 3)

        product.refresh_from_db()
        assert reservation.status == StockReservation.RESERVED
        assert reservation.expires_at > timezone.now()
        assert product.stock == 5
        assert product.reserved == 3
        assert product.available_stock == 2

    def test_reserve_beyond_available_is_rejected(self, make_product, store):
        product = make_product(name="Milk", stock=5)
        guard = StockGuard()
        guard.reserve(store.pk, product.pk, 4)

        with pytest.raises(InsufficientStock) as exc_info:
            guard.reserve(store.pk, product.pk, 2)

        assert exc_info.value.available == 1
        assert exc_info.value.requested == 2
        product.refresh_from_db()
        assert product.reserved == 4
        # The failed attempt is kept for auditing
        assert StockReservation.objects.filter(
            product=product, status=StockReservation.REJECTED
        ).exists()

    def test_reserve_product_of_other_store(self, make_product, second_store, store):
        product = make_product(store=second_store)
        with pytest.raises(ProductNotFound):
            StockGuard().reserve(store.pk, product.pk, 1)

    def test_reserve_inactive_product(self, make_product, store):
        product = make_product(is_active=False)
        with pytest.raises(ProductNotFound):
            StockGuard().reserve(store.pk, product.pk, 1)


@pytest.mark.django_db
class TestCommitAndRelease:
    def test_commit_deducts_stock(self, make_product, store):
        product = make_product(stock=5)
        guard = StockGuard()
        reservation = guard.reserve(store.pk, product.pk, 2)

        committed = guard.commit(reservation)

        product.refresh_from_db()
        assert committed.status == StockReservation.COMMITTED
        assert product.stock == 3
        assert product.reserved == 0

    def test_commit_twice_fails(self, make_product, store):
        product = make_product(stock=5)
        guard = StockGuard()
        reservation = guard.reserve(store.pk, product.pk, 2)
        guard.commit(reservation)

        with pytest.raises(ReservationError) as exc_info:
            guard.commit(reservation)

        assert exc_info.value.product_id == product.pk
        product.refresh_from_db()
        assert product.stock == 3

    def test_release_hands_units_back(self, make_product, store):
        product = make_product(stock=5)
        guard = StockGuard()
        reservation = guard.reserve(store.pk, product.pk, 2)

        released = guard.release(reservation)

        product.refresh_from_db()
        assert released.status == StockReservation.RELEASED
        assert product.stock == 5
        assert product.reserved == 0

    def test_release_is_idempotent(self, make_product, store):
        product = make_product(stock=5)
        guard = StockGuard()
        reservation = guard.reserve(store.pk, product.pk, 2)

        guard.release(reservation)
        guard.release(reservation)

        product.refresh_from_db()
        assert product.reserved == 0

    def test_released_reservation_cannot_be_committed(self, make_product, store):
        product = make_product(stock=5)
        guard = StockGuard()
        reservation = guard.reserve(store.pk, product.pk, 2)
        guard.release(reservation)

        with pytest.raises(ReservationError):
            guard.commit(reservation)

    def test_committed_reservation_cannot_be_released(self, make_product, store):
        product = make_product(stock=5)
        guard = StockGuard()
        reservation = guard.reserve(store.pk, product.pk, 2)
        guard.commit(reservation)

        with pytest.raises(ReservationError):
            guard.release(reservation)


@pytest.mark.django_db
class TestExpiry:
    def test_release_expired(self, make_product, store):
        product = make_product(stock=5)
        guard = StockGuard(ttl_seconds=60)
        reservation = guard.reserve(store.pk, product.pk, 3)

        released = guard.release_expired(now=timezone.now() + timedelta(minutes=5))

        product.refresh_from_db()
        reservation.refresh_from_db()
        assert released == 1
        assert reservation.status == StockReservation.RELEASED
        assert product.reserved == 0
        assert AuditLog.objects.filter(action=AuditLog.ACTION_RESERVATION_EXPIRED).count() == 1

    def test_unexpired_reservations_are_kept(self, make_product, store):
        product = make_product(stock=5)
        guard = StockGuard(ttl_seconds=60)
        guard.reserve(store.pk, product.pk, 3)

        assert guard.release_expired() == 0
        product.refresh_from_db()
        assert product.reserved == 3

    def test_expired_units_become_available_again(self, make_product, store):
        product = make_product(stock=3)
        guard = StockGuard(ttl_seconds=60)
        reservation = guard.reserve(store.pk, product.pk, 3)
        StockReservation.objects.filter(pk=reservation.pk).update(
            expires_at=timezone.now() - timedelta(seconds=1)
        )

        # reserve() sweeps expired reservations of the product first
        second = guard.reserve(store.pk, product.pk, 3)

        assert second.status == StockReservation.RESERVED
        reservation.refresh_from_db()
        assert reservation.status == StockReservation.RELEASED
