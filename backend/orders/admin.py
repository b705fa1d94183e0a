from django.contrib import admin

from .models import TempOrderLine, ReducedItem


@admin.register(TempOrderLine)
class TempOrderLineAdmin(admin.ModelAdmin):
    list_display = ("id", "table_no", "item_name", "quantity", "rate", "amount", "sent_quantity", "waiter_id")
    list_filter = ("table_no", "is_kitchen_item")
    search_fields = ("item_name",)
    readonly_fields = ("amount", "created_at", "updated_at")


@admin.register(ReducedItem)
class ReducedItemAdmin(admin.ModelAdmin):
    list_display = ("table_no", "item_name", "reduced_quantity", "amount", "reduced_by_user_name", "created_at")
    list_filter = ("table_no",)
    readonly_fields = ("created_at",)
