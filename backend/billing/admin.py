from django.contrib import admin

from .models import Bill, BillLine


class BillLineInline(admin.TabularInline):
    model = BillLine
    extra = 0
    readonly_fields = ["amount"]
    fields = ["position", "item_name", "item_code", "quantity", "rate", "amount"]


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = [
        "bill_no",
        "table_no",
        "status",
        "paymode",
        "bill_amount",
        "discount",
        "net_amount",
        "bill_date",
        "bill_time",
    ]
    list_filter = ["status", "paymode", "bill_date"]
    search_fields = ["bill_no", "bill_date"]
    readonly_fields = ["bill_amount", "net_amount", "total_quantity", "created_at", "updated_at", "closed_at"]
    inlines = [BillLineInline]
