from decimal import Decimal
from rest_framework import serializers

from core_backend.base import BaseModelSerializer, NameEnrichmentMixin
from .models import Bill, BillLine, PayMode

NON_NEGATIVE = Decimal("0")


class BillLineSerializer(BaseModelSerializer):
    class Meta:
        model = BillLine
        fields = ["id", "item_name", "item_code", "quantity", "rate", "amount"]
        read_only_fields = fields


class BillSerializer(NameEnrichmentMixin, BaseModelSerializer):
    """Bill with its lines and resolved table/customer/waiter/bank names"""

    lines = BillLineSerializer(many=True, read_only=True)

    name_lookups = [
        ("table_name", "table_no", "table_name"),
        ("customer_name", "customer_id", "customer_name"),
        ("waiter_name", "waiter_id", "waiter_name"),
        ("bank_name", "bank_id", "bank_name"),
    ]

    class Meta:
        model = Bill
        fields = [
            "bill_no",
            "table_no",
            "waiter_id",
            "user_id",
            "customer_id",
            "bank_id",
            "bill_amount",
            "discount",
            "net_amount",
            "cash_received",
            "return_amount",
            "total_quantity",
            "paymode",
            "status",
            "bill_date",
            "bill_time",
            "remarks",
            "closed_at",
            "created_at",
            "updated_at",
            "lines",
        ]
        read_only_fields = fields
        prefetch_related_fields = ["lines"]


class BillLineInputSerializer(serializers.Serializer):
    item_name = serializers.CharField(max_length=150)
    item_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2)
    rate = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=NON_NEGATIVE)


class PayBillSerializer(serializers.Serializer):
    cash_received = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, allow_null=True
    )
    return_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, default=NON_NEGATIVE
    )
    discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, allow_null=True
    )
    paymode = serializers.ChoiceField(choices=[PayMode.CASH, PayMode.BANK], default=PayMode.CASH)
    bank_id = serializers.IntegerField(required=False, allow_null=True)


class CreditBillSerializer(serializers.Serializer):
    # Optional here so a missing customer surfaces as customer_required
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    cash_received = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, default=NON_NEGATIVE
    )
    return_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, default=NON_NEGATIVE
    )
    discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, allow_null=True
    )


class UpdateBillSerializer(serializers.Serializer):
    lines = BillLineInputSerializer(many=True, allow_empty=False)
    discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, allow_null=True
    )
    cash_received = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, allow_null=True
    )
    return_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=NON_NEGATIVE, required=False, allow_null=True
    )
    paymode = serializers.ChoiceField(
        choices=[PayMode.CASH, PayMode.BANK, PayMode.CREDIT], required=False, allow_null=True
    )
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    bank_id = serializers.IntegerField(required=False, allow_null=True)
    remarks = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class BillSearchSerializer(serializers.Serializer):
    bill_no = serializers.IntegerField(required=False)
    date = serializers.CharField(required=False, max_length=10)
    customer_id = serializers.IntegerField(required=False)
    status = serializers.CharField(required=False, max_length=10)


class TodaySummarySerializer(serializers.Serializer):
    date = serializers.CharField()
    total_cash = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_credit = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    bill_count = serializers.IntegerField()
