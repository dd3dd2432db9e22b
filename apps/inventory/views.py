"""
Views for the store product catalog.

- Product grid with search by name or barcode
- Barcode lookup for scanners
"""

from django.conf import settings

from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.permissions import CanProcessSales
from apps.sales.store_resolution import StoreResolver, actor_for

from .catalog import ProductCatalog
from .models import Product
from .serializers import ProductListSerializer


class StoreScopedMixin:
    """Resolve the `store_id` URL argument against the requesting user's stores."""

    def get_store(self):
        if not hasattr(self, "_store"):
            self._store = StoreResolver().resolve(
                actor_for(self.request.user), self.kwargs["store_id"]
            )
        return self._store


class StoreProductListView(StoreScopedMixin, generics.ListAPIView):
    """
    Sellable products of a store.

    Query parameters:
    - q: Search by name or barcode
    - category: Filter by category label
    - low_stock: Only products at or below the low-stock threshold
    """

    serializer_class = ProductListSerializer
    permission_classes = [permissions.IsAuthenticated, CanProcessSales]

    def get_queryset(self):
        store = self.get_store()
        queryset = Product.objects.active().for_store(store.pk).select_related("store")

        query = self.request.query_params.get("q", "").strip()
        if query:
            queryset = queryset.search(query)

        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category=category)

        if self.request.query_params.get("low_stock") in ("1", "true", "True"):
            queryset = queryset.low_stock(settings.POS_LOW_STOCK_THRESHOLD)

        return queryset.order_by("name")


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, CanProcessSales])
def lookup_by_barcode(request, store_id):
    """
    Look up a sellable product by exact barcode for quick scanning.

    Query parameters:
    - barcode: The barcode value to search for (required)
    """
    barcode_value = request.query_params.get("barcode", "").strip()

    if not barcode_value:
        return Response(
            {"detail": "Barcode parameter is required."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    store = StoreResolver().resolve(actor_for(request.user), store_id)
    products = [
        product
        for product in ProductCatalog().search(store.pk, barcode_value)
        if product.barcode == barcode_value
    ]
    if not products:
        return Response(
            {"detail": f"No product found with barcode: {barcode_value}"},
            status=status.HTTP_404_NOT_FOUND,
        )

    return Response(ProductListSerializer(products[0]).data, status=status.HTTP_200_OK)
