from rest_framework import serializers


class TableStatusSerializer(serializers.Serializer):
    table_no = serializers.IntegerField()
    name = serializers.CharField(required=False)
    section = serializers.CharField(required=False, allow_blank=True)
    status = serializers.CharField()


class TableLineSerializer(serializers.Serializer):
    """A row of the combined table view: billed (negative id) or provisional"""

    id = serializers.IntegerField()
    table_no = serializers.IntegerField()
    item_name = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2)
    rate = serializers.DecimalField(max_digits=10, decimal_places=2)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    billed = serializers.BooleanField()
    bill_no = serializers.IntegerField(required=False)
    waiter_id = serializers.IntegerField(required=False)
    sent_quantity = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)


class PrintKotSerializer(serializers.Serializer):
    waiter_id = serializers.IntegerField(required=False, allow_null=True)
    table_name = serializers.CharField(max_length=50, required=False, allow_blank=True)


class CloseTableSerializer(serializers.Serializer):
    waiter_id = serializers.IntegerField(min_value=1)
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    remarks = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class ShiftTableSerializer(serializers.Serializer):
    source_table_no = serializers.IntegerField(min_value=1)
    target_table_no = serializers.IntegerField(min_value=1)
    target_table_name = serializers.CharField(max_length=50, required=False, allow_blank=True)


class ShiftResultSerializer(serializers.Serializer):
    source_table_no = serializers.IntegerField()
    target_table_no = serializers.IntegerField()
    lines_moved = serializers.IntegerField()
    bill_no = serializers.IntegerField(allow_null=True)
    tickets_moved = serializers.IntegerField()
