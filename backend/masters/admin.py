from django.contrib import admin

from .models import DiningTable, MenuItem, Customer, Waiter, Bank


@admin.register(DiningTable)
class DiningTableAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "section", "is_active")
    list_filter = ("section", "is_active")


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "item_code", "rate", "is_kitchen_item", "is_active")
    list_filter = ("is_kitchen_item", "is_active")
    search_fields = ("name", "item_code")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone")
    search_fields = ("name", "phone")


admin.site.register(Waiter)
admin.site.register(Bank)
