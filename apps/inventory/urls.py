"""
URL configuration for inventory app.
"""

from django.urls import path

from . import views

app_name = "inventory"

urlpatterns = [
    path(
        "api/pos/stores/<uuid:store_id>/products/",
        views.StoreProductListView.as_view(),
        name="store_products",
    ),
    path(
        "api/pos/stores/<uuid:store_id>/products/lookup/",
        views.lookup_by_barcode,
        name="lookup_by_barcode",
    ),
]
