"""
Serializers for inventory models.
"""

from django.conf import settings

from rest_framework import serializers

from .models import Product


class ProductListSerializer(serializers.ModelSerializer):
    """Product as shown on the POS product grid."""

    available_stock = serializers.IntegerField(read_only=True)
    low_stock = serializers.SerializerMethodField()
    out_of_stock = serializers.BooleanField(source="is_out_of_stock", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "category",
            "barcode",
            "gross_price",
            "vat_rate",
            "stock",
            "available_stock",
            "low_stock",
            "out_of_stock",
            "store",
        ]
        read_only_fields = fields

    def get_low_stock(self, obj):
        threshold = self.context.get("low_stock_threshold", settings.POS_LOW_STOCK_THRESHOLD)
        return obj.is_low_stock(threshold)
