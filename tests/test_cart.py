"""
Tests for the store-bound cart.

Carts never touch the database, so most tests use product snapshots.
"""

from decimal import Decimal

import pytest

from apps.sales.cart import Cart, CartProduct
from apps.sales.exceptions import (
    InsufficientStock,
    OutOfStock,
    ProductNotFound,
    StoreMismatch,
    ValidationError,
)

STORE = "store-a"


def snapshot(id=1, name="Coffee", price="12.10", vat="21.00", stock=10, store_id=STORE):
    return CartProduct(
        id=id,
        name=name,
        gross_price=Decimal(price),
        vat_rate=Decimal(vat),
        stock=stock,
        store_id=store_id,
    )


class FakeCatalog:
    def __init__(self, products):
        self.products = {product.id: product for product in products}

    def get(self, store_id, product_id):
        if product_id not in self.products:
            raise ProductNotFound(product_id, store_id)
        return self.products[product_id]


class TestAddLine:
    def test_add_new_line(self):
        cart = Cart(STORE)
        line = cart.add_line(snapshot(), 2)

        assert len(cart) == 1
        assert line.quantity == 2
        assert cart.total() == Decimal("24.20")
        assert cart.item_count == 2

    def test_adding_same_product_merges(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(), 2)
        cart.add_line(snapshot(), 3)

        assert len(cart) == 1
        assert cart.get_line(1).quantity == 5

    def test_merge_beyond_stock_rejected_and_cart_unchanged(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(stock=3), 2)

        with pytest.raises(InsufficientStock) as exc_info:
            cart.add_line(snapshot(stock=3), 2)

        assert exc_info.value.requested == 4
        assert exc_info.value.available == 3
        assert cart.get_line(1).quantity == 2

    def test_out_of_stock(self):
        cart = Cart(STORE)
        with pytest.raises(OutOfStock):
            cart.add_line(snapshot(stock=0))
        assert cart.is_empty

    def test_other_store_rejected(self):
        cart = Cart(STORE)
        with pytest.raises(StoreMismatch) as exc_info:
            cart.add_line(snapshot(store_id="store-b"))

        assert exc_info.value.cart_store_id == STORE
        assert exc_info.value.product_store_id == "store-b"
        assert cart.is_empty

    @pytest.mark.parametrize("qty", [0, -1, 1.5, "2", True])
    def test_bad_quantity_rejected(self, qty):
        cart = Cart(STORE)
        with pytest.raises(ValidationError):
            cart.add_line(snapshot(), qty)

    def test_merge_takes_latest_snapshot(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(price="12.10"), 1)
        cart.add_line(snapshot(price="13.00"), 1)

        assert cart.get_line(1).unit_price == Decimal("13.00")
        assert cart.total() == Decimal("26.00")


class TestSetQuantity:
    def test_update_quantity(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(), 1)
        cart.set_quantity(1, 4)
        assert cart.get_line(1).quantity == 4

    def test_zero_removes_line(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(), 1)
        assert cart.set_quantity(1, 0) is None
        assert cart.is_empty

    def test_negative_removes_line(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(), 3)
        cart.set_quantity(1, -2)
        assert cart.is_empty

    def test_over_stock_leaves_line_unchanged(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(stock=5), 2)

        with pytest.raises(InsufficientStock):
            cart.set_quantity(1, 6)

        assert cart.get_line(1).quantity == 2

    def test_current_product_replaces_snapshot(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(stock=5), 1)

        with pytest.raises(InsufficientStock) as exc_info:
            cart.set_quantity(1, 4, product=snapshot(stock=2))

        assert exc_info.value.available == 2
        assert cart.get_line(1).quantity == 1
        assert cart.get_line(1).product.stock == 5

        cart.set_quantity(1, 2, product=snapshot(stock=2))
        assert cart.get_line(1).product.stock == 2

    def test_unknown_product(self):
        cart = Cart(STORE)
        with pytest.raises(ProductNotFound):
            cart.set_quantity(99, 1)


class TestRemoveAndClear:
    def test_remove_is_idempotent(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(), 1)
        cart.remove_line(1)
        cart.remove_line(1)
        assert cart.is_empty

    def test_clear(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(id=1), 1)
        cart.add_line(snapshot(id=2, name="Tea"), 1)
        cart.clear()

        assert cart.is_empty
        assert cart.total() == Decimal("0.00")

    def test_empty_total_is_zero(self):
        assert Cart(STORE).total() == Decimal("0.00")


class TestRefresh:
    def test_drops_missing_products_and_reports_overstock(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(id=1, stock=10), 4)
        cart.add_line(snapshot(id=2, name="Tea", stock=10), 1)

        catalog = FakeCatalog([snapshot(id=1, stock=3, price="11.00")])
        warnings = cart.refresh(catalog)

        assert [line.product_id for line in cart] == [1]
        assert cart.get_line(1).unit_price == Decimal("11.00")
        assert [line.product_id for line in warnings] == [1]
        assert warnings[0].exceeds_stock()


class TestSerialization:
    def test_round_trip_preserves_lines(self):
        cart = Cart(STORE)
        cart.add_line(snapshot(id=1), 2)
        cart.add_line(snapshot(id=2, name="Tea", price="3.50", vat="10.00"), 1)

        restored = Cart.from_dict(cart.to_dict())

        assert restored.store_id == STORE
        assert [(line.product_id, line.quantity) for line in restored] == [(1, 2), (2, 1)]
        assert restored.total() == cart.total()
        assert restored.get_line(2).tax_rate.key == "10.00"

    def test_lines_of_other_store_rejected_on_load(self):
        data = Cart(STORE).to_dict()
        data["lines"] = [{"product": snapshot(store_id="store-b").to_dict(), "quantity": 1}]

        with pytest.raises(StoreMismatch):
            Cart.from_dict(data)


@pytest.mark.django_db
class TestModelProducts:
    def test_snapshot_uses_available_stock(self, make_product, store):
        product = make_product(stock=5)
        product.reserved = 2
        product.save()

        cart = Cart(store.pk)
        with pytest.raises(InsufficientStock) as exc_info:
            cart.add_line(product, 4)

        assert exc_info.value.available == 3

    def test_model_product_of_other_store_rejected(self, make_product, store, second_store):
        product = make_product(store=second_store)
        with pytest.raises(StoreMismatch):
            Cart(store.pk).add_line(product)
