from django.contrib import admin
from django.utils.html import format_html

from .models import KitchenTicket, KitchenTicketLine


class KitchenTicketLineInline(admin.TabularInline):
    """Lines are a printed snapshot; shown read-only"""
    model = KitchenTicketLine
    extra = 0
    can_delete = False
    readonly_fields = ['item_id', 'item_name', 'quantity', 'rate', 'position']


@admin.register(KitchenTicket)
class KitchenTicketAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'table_name',
        'status',
        'item_count',
        'total_quantity',
        'sent_at',
        'prep_time_minutes',
        'status_indicator',
    ]
    list_filter = ['status', 'table_no', 'sent_at']
    readonly_fields = ['sent_at', 'ready_at', 'served_at', 'prep_time_minutes']
    inlines = [KitchenTicketLineInline]

    def status_indicator(self, obj):
        status_colors = {
            'SENT': '#ffa500',   # orange
            'READY': '#00cc66',  # green
            'SERVE': '#666666',  # gray
        }
        color = status_colors.get(obj.status, '#000000')
        return format_html('<span style="color: {}; font-weight: bold;">●</span>', color)

    status_indicator.short_description = 'Status'
