"""
Tests for cached store summaries.
"""

from decimal import Decimal

import pytest

from apps.core.cache_utils import get_or_set_cache, invalidate_store_cache, store_cache_key
from apps.sales.analytics import AnalyticsAggregator
from apps.sales.cart import Cart
from apps.sales.services import SaleCommitter


def sell(user, store, *lines, method="card"):
    cart = Cart(store.pk)
    for product, qty in lines:
        cart.add_line(product, qty)
    return SaleCommitter(user, store).checkout(
        cart, method, amount_tendered="1000.00" if method == "cash" else None
    ).sale


@pytest.mark.django_db
class TestStoreSummary:
    def test_empty_store(self, store):
        summary = AnalyticsAggregator().store_summary(store)

        assert summary["sale_count"] == 0
        assert summary["revenue"] == "0.00"
        assert summary["vat_breakdown"] == {}
        assert summary["top_products"] == []

    def test_revenue_vat_and_best_sellers(self, manager, store, make_product):
        coffee = make_product(name="Coffee", gross_price="12.10", vat_rate="10.00")
        wine = make_product(name="Wine", gross_price="121.00", vat_rate="21.00")
        sell(manager, store, (coffee, 2), (wine, 1))
        sell(manager, store, (coffee, 1), method="cash")

        summary = AnalyticsAggregator().store_summary(store)

        assert summary["sale_count"] == 2
        assert Decimal(summary["revenue"]) == Decimal("157.30")
        assert Decimal(summary["vat_collected"]) == Decimal("24.30")
        assert summary["vat_breakdown"] == {
            "10.00": {"net": "33.00", "vat": "3.30"},
            "21.00": {"net": "100.00", "vat": "21.00"},
        }
        assert [p["name"] for p in summary["top_products"]] == ["Coffee", "Wine"]
        assert summary["top_products"][0]["quantity"] == 3

    def test_summary_is_scoped_to_store(self, manager, store, second_store, make_product):
        sell(manager, store, (make_product(), 1))

        summary = AnalyticsAggregator().store_summary(second_store)

        assert summary["sale_count"] == 0

    def test_summary_cached_until_next_sale(
        self, manager, store, make_product, django_capture_on_commit_callbacks
    ):
        product = make_product(gross_price="10.00", stock=20)
        aggregator = AnalyticsAggregator()

        with django_capture_on_commit_callbacks(execute=True):
            sell(manager, store, (product, 1))
        assert aggregator.store_summary(store)["sale_count"] == 1

        # A sale written behind the engine's back is not seen while cached
        from apps.sales.models import Sale

        Sale.objects.create(
            store=store,
            user=manager,
            total=Decimal("5.00"),
            net_amount=Decimal("5.00"),
            total_vat=Decimal("0.00"),
            payment_method=Sale.CARD,
        )
        assert aggregator.store_summary(store)["sale_count"] == 1

        with django_capture_on_commit_callbacks(execute=True):
            sell(manager, store, (product, 1))
        assert aggregator.store_summary(store)["sale_count"] == 3


class TestStoreCacheHelpers:
    def test_key_depends_on_store_and_params(self):
        key = store_cache_key("store-a", "summary", top=5)

        assert key.startswith("store:store-a:summary:")
        assert key == store_cache_key("store-a", "summary", top=5)
        assert key != store_cache_key("store-a", "summary", top=3)
        assert key != store_cache_key("store-b", "summary", top=5)

    def test_invalidate_drops_cached_value(self):
        key = store_cache_key("store-a", "summary", top=5)
        calls = []

        def compute():
            calls.append(1)
            return {"sale_count": len(calls)}

        assert get_or_set_cache(key, compute, timeout=60, cache_alias="query") == {"sale_count": 1}
        assert get_or_set_cache(key, compute, timeout=60, cache_alias="query") == {"sale_count": 1}

        invalidate_store_cache("store-a", "summary", cache_alias="query")

        assert get_or_set_cache(key, compute, timeout=60, cache_alias="query") == {"sale_count": 2}
