"""
Serializers for the point-of-sale API.

Request serializers only validate shape; business rules (stock, store
scoping, tender) are enforced by the sale engine.
"""

from rest_framework import serializers

from apps.core.models import Store

from .models import Sale, SaleItem
from .vat import decompose


class StoreSerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = ["id", "name", "address", "phone"]


class OpenSessionSerializer(serializers.Serializer):
    """Open a POS session, optionally replacing the current one."""

    store_id = serializers.UUIDField(required=False, allow_null=True)
    previous_session_id = serializers.CharField(required=False, allow_blank=True)


class AddLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(default=1, min_value=1)


class SetQuantitySerializer(serializers.Serializer):
    # Zero or less removes the line
    quantity = serializers.IntegerField()


class CustomerInfoSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=30)
    email = serializers.EmailField(required=False, allow_blank=True)


class CheckoutSerializer(serializers.Serializer):
    """
    Checkout request.

    Example:
        {"payment_method": "cash", "amount_tendered": "60.00",
         "customer_info": {"name": "Ana"}}
    """

    payment_method = serializers.ChoiceField(choices=Sale.PAYMENT_METHOD_CHOICES)
    amount_tendered = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    customer_info = CustomerInfoSerializer(required=False, allow_null=True)


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = ["product_id", "name", "unit_price", "vat_rate", "quantity", "line_total"]


class SaleSerializer(serializers.ModelSerializer):
    """Persisted sale as returned to POS clients."""

    items = SaleItemSerializer(many=True, read_only=True)
    store_id = serializers.UUIDField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "total",
            "net_amount",
            "total_vat",
            "vat_breakdown",
            "payment_method",
            "amount_tendered",
            "change_due",
            "items",
            "customer_info",
            "store_id",
            "user_id",
            "created_at",
        ]
        read_only_fields = fields


def serialize_cart(cart):
    """Cart lines with live totals and VAT breakdown."""
    breakdown = decompose(cart)
    return {
        "store_id": cart.store_id,
        "lines": [
            {
                "product_id": line.product_id,
                "name": line.product.name,
                "category": line.product.category,
                "unit_price": str(line.unit_price),
                "vat_rate": line.tax_rate.key,
                "quantity": line.quantity,
                "line_total": str(line.line_total),
                "available_stock": line.product.stock,
            }
            for line in cart
        ],
        "item_count": cart.item_count,
        "total": str(cart.total()),
        "vat": breakdown.as_dict(),
    }
