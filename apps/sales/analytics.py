"""
Store revenue summaries for the dashboard.

Summaries are cached per store in the "query" cache and dropped every
time a sale is committed in that store.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum

from apps.core.cache_utils import get_or_set_cache, invalidate_store_cache, store_cache_key

from .models import Sale, SaleItem
from .vat import decompose

logger = logging.getLogger(__name__)

SUMMARY_PREFIX = "summary"
ZERO = Decimal("0.00")


class AnalyticsAggregator:
    def __init__(self, cache_alias="query", timeout=None):
        self.cache_alias = cache_alias
        self.timeout = timeout if timeout is not None else settings.POS_ANALYTICS_CACHE_TIMEOUT

    def sale_committed(self, sale):
        """Drop the cached summaries of the sale's store."""
        invalidate_store_cache(sale.store_id, prefix=SUMMARY_PREFIX, cache_alias=self.cache_alias)
        logger.debug(f"Analytics cache invalidated for store {sale.store_id}")

    def store_summary(self, store, top=5):
        """
        Revenue, sale count, VAT collected and best sellers of a store.

        Args:
            store: Store instance
            top: Number of best-selling products to include

        Returns:
            dict: JSON-ready summary (amounts as strings)
        """
        key = store_cache_key(store.pk, SUMMARY_PREFIX, top=top)
        return get_or_set_cache(
            key,
            lambda: self._compute(store, top),
            timeout=self.timeout,
            cache_alias=self.cache_alias,
        )

    def _compute(self, store, top):
        totals = Sale.objects.filter(store=store).aggregate(
            revenue=Sum("total"),
            net=Sum("net_amount"),
            vat=Sum("total_vat"),
            count=Count("id"),
        )
        items = SaleItem.objects.filter(sale__store=store)
        breakdown = decompose(items)

        best_sellers = (
            items.values("product_id", "name")
            .annotate(quantity=Sum("quantity"), revenue=Sum("line_total"))
            .order_by("-quantity", "name")[:top]
        )

        return {
            "store_id": str(store.pk),
            "sale_count": totals["count"],
            "revenue": str(totals["revenue"] or ZERO),
            "net_revenue": str(totals["net"] or ZERO),
            "vat_collected": str(totals["vat"] or ZERO),
            "vat_breakdown": breakdown.as_dict()["groups"],
            "top_products": [
                {
                    "product_id": row["product_id"],
                    "name": row["name"],
                    "quantity": row["quantity"],
                    "revenue": str(row["revenue"]),
                }
                for row in best_sellers
            ],
        }
