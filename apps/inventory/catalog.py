"""
Read-only product lookups used by the point of sale.

Only active products are sellable; every lookup is scoped to one store.
"""

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.sales.exceptions import ProductNotFound

from .models import Product


class ProductCatalog:
    def __init__(self, queryset=None):
        self.queryset = queryset if queryset is not None else Product.objects.all()

    def _store_products(self, store_id):
        return self.queryset.active().for_store(store_id).select_related("store")

    def get(self, store_id, product_id):
        """
        Return an active product of the given store.

        Raises:
            ProductNotFound: unknown, inactive or owned by another store
        """
        try:
            return self._store_products(store_id).get(pk=product_id)
        except (Product.DoesNotExist, ValueError, DjangoValidationError):
            raise ProductNotFound(product_id, store_id)

    def list_by_store(self, store_id):
        return list(self._store_products(store_id))

    def search(self, store_id, term):
        """Products of a store whose name or barcode contains `term`."""
        return list(self._store_products(store_id).search(term))
