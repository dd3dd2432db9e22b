"""
Store-bound shopping cart for the point of sale.

A cart is plain in-memory state owned by a single POS session. It never
touches the database: lines hold a snapshot of the product taken when
the product was offered to the cart, and stock is checked against that
snapshot. The authoritative check happens again at checkout, in
apps.sales.stock_guard.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from decimal import Decimal

from .exceptions import (
    InsufficientStock,
    OutOfStock,
    ProductNotFound,
    StoreMismatch,
    ValidationError,
    to_decimal,
)
from .tax import TaxRate, quantize_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartProduct:
    """Snapshot of the catalog fields a cart line depends on."""

    id: int
    name: str
    gross_price: Decimal
    vat_rate: Decimal
    stock: int
    store_id: str
    category: str = ""

    @classmethod
    def from_product(cls, product) -> CartProduct:
        """Build a snapshot from a Product model instance (or another snapshot)."""
        if isinstance(product, CartProduct):
            return product
        return cls(
            id=product.pk,
            name=product.name,
            gross_price=quantize_money(product.gross_price),
            vat_rate=to_decimal(product.vat_rate, field="VAT rate"),
            stock=product.available_stock,
            store_id=str(product.store_id),
            category=product.category or "",
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["gross_price"] = str(self.gross_price)
        data["vat_rate"] = str(self.vat_rate)
        return data

    @classmethod
    def from_dict(cls, data) -> CartProduct:
        return cls(
            id=data["id"],
            name=data["name"],
            gross_price=Decimal(data["gross_price"]),
            vat_rate=Decimal(data["vat_rate"]),
            stock=int(data["stock"]),
            store_id=str(data["store_id"]),
            category=data.get("category", ""),
        )


@dataclass
class CartLine:
    product: CartProduct
    quantity: int

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def unit_price(self) -> Decimal:
        return self.product.gross_price

    @property
    def tax_rate(self) -> TaxRate:
        return TaxRate.of(self.product.vat_rate)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def exceeds_stock(self) -> bool:
        return self.quantity > self.product.stock


def _check_quantity(qty):
    if isinstance(qty, bool) or not isinstance(qty, int):
        raise ValidationError(f"Quantity must be a whole number, got {qty!r}.")
    return qty


class Cart:
    """
    Ordered collection of cart lines bound to exactly one store.

    Products from any other store are rejected with StoreMismatch, which
    keeps every cart, and therefore every sale, inside a single store.
    """

    def __init__(self, store_id, lines=None):
        self.store_id = str(store_id)
        self._lines: list[CartLine] = []
        for line in lines or []:
            self._ensure_same_store(line.product)
            self._lines.append(line)

    def __repr__(self):
        return f"<Cart store={self.store_id} lines={len(self._lines)} total={self.total()}>"

    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(list(self._lines))

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def get_line(self, product_id):
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    def add_line(self, product, qty=1) -> CartLine:
        """
        Add `qty` units of a product, merging with an existing line.

        Raises:
            ValidationError: qty below 1
            StoreMismatch: product belongs to another store
            OutOfStock: nothing left to sell
            InsufficientStock: the merged quantity would exceed stock
        """
        qty = _check_quantity(qty)
        if qty < 1:
            raise ValidationError("Quantity must be at least 1.")

        snapshot = CartProduct.from_product(product)
        self._ensure_same_store(snapshot)

        if snapshot.stock <= 0:
            raise OutOfStock(snapshot.id, snapshot.name)

        line = self.get_line(snapshot.id)
        current = line.quantity if line else 0
        if current + qty > snapshot.stock:
            raise InsufficientStock(
                snapshot.id, snapshot.name, requested=current + qty, available=snapshot.stock
            )

        if line:
            line.product = snapshot
            line.quantity = current + qty
        else:
            line = CartLine(product=snapshot, quantity=qty)
            self._lines.append(line)

        logger.debug(f"Cart {self.store_id}: {snapshot.name} x {line.quantity}")
        return line

    def set_quantity(self, product_id, qty, product=None):
        """
        Set the quantity of an existing line; zero or less removes it.

        When `product` is given (the current catalog row), stock is checked
        against it and it replaces the line's snapshot. The cart is left
        unchanged when the quantity exceeds stock.
        """
        qty = _check_quantity(qty)
        line = self.get_line(product_id)
        if line is None:
            raise ProductNotFound(product_id, self.store_id)

        if qty <= 0:
            self.remove_line(product_id)
            return None

        snapshot = line.product
        if product is not None:
            snapshot = CartProduct.from_product(product)
            self._ensure_same_store(snapshot)

        if qty > snapshot.stock:
            raise InsufficientStock(
                snapshot.id, snapshot.name, requested=qty, available=snapshot.stock
            )

        line.product = snapshot
        line.quantity = qty
        return line

    def remove_line(self, product_id):
        """Remove a line. Removing an absent line is a no-op."""
        self._lines = [line for line in self._lines if line.product_id != product_id]

    def total(self) -> Decimal:
        """Gross total: sum of unit price x quantity."""
        return sum((line.line_total for line in self._lines), Decimal("0.00"))

    def clear(self):
        self._lines = []

    def refresh(self, catalog):
        """
        Reload product snapshots from the catalog.

        Lines whose product disappeared are dropped. Returns the lines that
        now ask for more than the available stock so the caller can warn.
        """
        refreshed = []
        for line in self._lines:
            try:
                product = catalog.get(self.store_id, line.product_id)
            except ProductNotFound:
                logger.info(f"Dropping product {line.product_id} from cart: no longer sellable")
                continue
            refreshed.append(replace(line, product=CartProduct.from_product(product)))
        self._lines = refreshed
        return [line for line in self._lines if line.exceeds_stock()]

    def to_dict(self) -> dict:
        return {
            "store_id": self.store_id,
            "lines": [
                {"product": line.product.to_dict(), "quantity": line.quantity}
                for line in self._lines
            ],
        }

    @classmethod
    def from_dict(cls, data) -> Cart:
        lines = [
            CartLine(product=CartProduct.from_dict(item["product"]), quantity=item["quantity"])
            for item in data.get("lines", [])
        ]
        return cls(data["store_id"], lines)

    def _ensure_same_store(self, product):
        if str(product.store_id) != self.store_id:
            raise StoreMismatch(product.id, self.store_id, product.store_id)
