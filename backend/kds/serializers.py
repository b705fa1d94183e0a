from rest_framework import serializers

from core_backend.base import BaseModelSerializer, NameEnrichmentMixin
from .models import KitchenTicket, KitchenTicketLine


class KitchenTicketLineSerializer(BaseModelSerializer):
    class Meta:
        model = KitchenTicketLine
        fields = ['item_id', 'item_name', 'quantity', 'rate']


class KitchenTicketSerializer(NameEnrichmentMixin, BaseModelSerializer):
    lines = KitchenTicketLineSerializer(many=True, read_only=True)
    prep_time_minutes = serializers.IntegerField(read_only=True)

    name_lookups = [
        ('waiter_name', 'waiter_id', 'waiter_name'),
    ]

    class Meta:
        model = KitchenTicket
        fields = [
            'id',
            'table_no',
            'table_name',
            'waiter_id',
            'status',
            'item_count',
            'total_quantity',
            'sent_at',
            'ready_at',
            'served_at',
            'prep_time_minutes',
            'lines',
        ]
        read_only_fields = fields
        prefetch_related_fields = ['lines']


class TicketLineInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField(required=False, allow_null=True)
    item_name = serializers.CharField(max_length=150)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2)
    rate = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=0)


class SendTicketSerializer(serializers.Serializer):
    table_no = serializers.IntegerField(min_value=1)
    table_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    waiter_id = serializers.IntegerField(required=False, allow_null=True)
    lines = TicketLineInputSerializer(many=True)


def grouped_tickets_data(grouped):
    """Serialize ``{table_no: [tickets]}`` as a list, keeping the table order"""
    return [
        {
            'table_no': table_no,
            'table_name': tickets[0].table_name if tickets else '',
            'tickets': KitchenTicketSerializer(tickets, many=True).data,
        }
        for table_no, tickets in grouped.items()
    ]
