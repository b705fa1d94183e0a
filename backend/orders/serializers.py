from decimal import Decimal
from rest_framework import serializers

from core_backend.base import BaseModelSerializer, TimestampedSerializer, NameEnrichmentMixin
from .models import TempOrderLine, ReducedItem


class TempOrderLineSerializer(NameEnrichmentMixin, TimestampedSerializer):
    pending_quantity = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    name_lookups = [
        ("table_name", "table_no", "table_name"),
        ("waiter_name", "waiter_id", "waiter_name"),
    ]

    class Meta:
        model = TempOrderLine
        fields = [
            "id",
            "table_no",
            "item_name",
            "quantity",
            "rate",
            "amount",
            "waiter_id",
            "is_kitchen_item",
            "sent_quantity",
            "pending_quantity",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AddOrderLineSerializer(serializers.Serializer):
    """Input for adding a line to a table (or updating one by ``line_id``)."""

    item_name = serializers.CharField(max_length=150)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2)
    rate = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=Decimal("0")
    )
    waiter_id = serializers.IntegerField(min_value=1)
    line_id = serializers.IntegerField(required=False, allow_null=True)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class UpdateOrderLineSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    rate = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=Decimal("0"))
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate(self, data):
        data = super().validate(data)
        if "quantity" not in data and "rate" not in data:
            raise serializers.ValidationError("Provide quantity and/or rate")
        return data


class ReducedItemSerializer(BaseModelSerializer):
    class Meta:
        model = ReducedItem
        fields = "__all__"
