"""
Tests for per-rate VAT breakdown of carts and sale items.
"""

from decimal import Decimal

from apps.sales.cart import Cart, CartProduct
from apps.sales.vat import VatBreakdown, decompose


def product(id, price, vat, stock=100):
    return CartProduct(
        id=id,
        name=f"Product {id}",
        gross_price=Decimal(price),
        vat_rate=Decimal(vat),
        stock=stock,
        store_id="s1",
    )


class TestDecompose:
    def test_mixed_rates(self):
        cart = Cart("s1")
        cart.add_line(product(1, "12.10", "10"), 2)
        cart.add_line(product(2, "126.00", "26"), 1)

        breakdown = decompose(cart)

        assert breakdown["10"].net == Decimal("22.00")
        assert breakdown["10"].vat == Decimal("2.20")
        assert breakdown["26"].net == Decimal("100.00")
        assert breakdown["26"].vat == Decimal("26.00")
        assert breakdown.gross_total == Decimal("150.20")
        assert breakdown.gross_total == cart.total()

    def test_lines_with_same_rate_are_grouped(self):
        cart = Cart("s1")
        cart.add_line(product(1, "121.00", "21"), 1)
        cart.add_line(product(2, "60.50", "21.00"), 2)

        breakdown = decompose(cart)

        assert len(breakdown) == 1
        assert "21.00" in breakdown
        assert breakdown["21"].net == Decimal("200.00")
        assert breakdown["21"].vat == Decimal("42.00")

    def test_rounding_happens_per_line_total(self):
        # 3 x 0.99 at 21%: 2.97 / 1.21 = 2.4545... -> 2.45
        cart = Cart("s1")
        cart.add_line(product(1, "0.99", "21"), 3)

        breakdown = decompose(cart)

        assert breakdown["21"].net == Decimal("2.45")
        assert breakdown["21"].vat == Decimal("0.52")

    def test_totals_reconcile(self):
        cart = Cart("s1")
        cart.add_line(product(1, "0.99", "21"), 7)
        cart.add_line(product(2, "1.05", "10"), 3)
        cart.add_line(product(3, "4.00", "0"), 1)

        breakdown = decompose(cart)

        assert breakdown.net_total + breakdown.vat_total == cart.total()
        assert breakdown["0"].vat == Decimal("0.00")

    def test_empty_cart(self):
        breakdown = decompose(Cart("s1"))

        assert len(breakdown) == 0
        assert breakdown.gross_total == Decimal("0.00")
        assert breakdown.as_dict() == {
            "groups": {},
            "net_total": "0.00",
            "vat_total": "0.00",
            "gross_total": "0.00",
        }


class TestVatBreakdown:
    def test_as_dict_uses_normalised_keys_and_strings(self):
        breakdown = VatBreakdown()
        breakdown.add("21", Decimal("121.00"))
        breakdown.add(Decimal("5.5"), Decimal("10.55"))

        data = breakdown.as_dict()

        assert list(data["groups"]) == ["21.00", "5.50"]
        assert data["groups"]["21.00"] == {"net": "100.00", "vat": "21.00"}
        assert data["groups"]["5.50"] == {"net": "10.00", "vat": "0.55"}
        assert data["gross_total"] == "131.55"
