"""
Read-only lookups over master data.

The order, kitchen and billing engines only ever need two things from master
data: the current price of an item, and human-readable names to decorate
their responses with. Both are served from here.
"""
from decimal import Decimal
from typing import Optional
import logging

from core_backend.exceptions import ItemNotFound, NotFound

from .models import DiningTable, MenuItem, Customer, Waiter, Bank

logger = logging.getLogger(__name__)


class ItemCatalog:
    """Resolves item names against the active menu."""

    @staticmethod
    def _get(item_name: str) -> MenuItem:
        item = (
            MenuItem.objects.filter(name__iexact=item_name.strip(), is_active=True)
            .order_by("id")
            .first()
        )
        if item is None:
            raise ItemNotFound(item_name)
        return item

    @staticmethod
    def rate_of(item_name: str) -> Decimal:
        """Current price for ``item_name``. Raises ItemNotFound."""
        return ItemCatalog._get(item_name).rate

    @staticmethod
    def is_kitchen_item(item_name: str) -> bool:
        """
        Whether the item is prepared in the kitchen (and so printed on a KOT).
        Unknown items are treated as kitchen items.
        """
        try:
            return ItemCatalog._get(item_name).is_kitchen_item
        except ItemNotFound:
            return True

    @staticmethod
    def item_id_of(item_name: str) -> Optional[int]:
        try:
            return ItemCatalog._get(item_name).id
        except ItemNotFound:
            return None

    @staticmethod
    def item_code_of(item_name: str) -> Optional[str]:
        try:
            return ItemCatalog._get(item_name).item_code or None
        except ItemNotFound:
            return None


class TableDirectory:
    """Existence checks for the tables that orders, tickets and bills reference."""

    @staticmethod
    def require(table_no) -> DiningTable:
        """The table numbered ``table_no``. Raises NotFound."""
        try:
            return DiningTable.objects.get(pk=table_no)
        except (DiningTable.DoesNotExist, ValueError, TypeError):
            logger.warning(f"Table {table_no} not found")
            raise NotFound(f"Table {table_no} not found", {"table_no": table_no})


class NameLookupService:
    """
    Name lookups used to enrich outward-facing responses.

    A lookup never fails the caller: missing records and lookup errors are
    logged and reported as ``None``.
    """

    @staticmethod
    def _name_of(model, entity_id, label) -> Optional[str]:
        if entity_id is None:
            return None
        try:
            return model.objects.values_list("name", flat=True).get(pk=entity_id)
        except model.DoesNotExist:
            logger.warning(f"{label} {entity_id} not found while resolving name")
        except Exception as e:
            logger.warning(f"Error resolving {label.lower()} name for {entity_id}: {e}")
        return None

    @staticmethod
    def table_name(table_no) -> Optional[str]:
        return NameLookupService._name_of(DiningTable, table_no, "Table")

    @staticmethod
    def customer_name(customer_id) -> Optional[str]:
        return NameLookupService._name_of(Customer, customer_id, "Customer")

    @staticmethod
    def waiter_name(waiter_id) -> Optional[str]:
        return NameLookupService._name_of(Waiter, waiter_id, "Waiter")

    @staticmethod
    def bank_name(bank_id) -> Optional[str]:
        return NameLookupService._name_of(Bank, bank_id, "Bank")
