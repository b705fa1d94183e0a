"""
Master data lookups: item prices for the order store and the names used
to decorate responses.
"""
from decimal import Decimal

import pytest

from core_backend.exceptions import ItemNotFound
from masters.models import MenuItem
from masters.services import ItemCatalog, NameLookupService


@pytest.mark.django_db
class TestItemCatalog:

    def test_rate_of_known_item(self, menu):
        assert ItemCatalog.rate_of("Tea") == Decimal("20.00")

    def test_lookup_ignores_case_and_whitespace(self, menu):
        assert ItemCatalog.rate_of("  samosa ") == Decimal("15.00")

    def test_unknown_item_raises_item_not_found(self, menu):
        with pytest.raises(ItemNotFound) as exc_info:
            ItemCatalog.rate_of("Dosa")
        assert exc_info.value.item_name == "Dosa"

    def test_inactive_items_are_not_priced(self, menu):
        MenuItem.objects.filter(name="Tea").update(is_active=False)

        with pytest.raises(ItemNotFound):
            ItemCatalog.rate_of("Tea")

    def test_kitchen_flag(self, menu):
        assert ItemCatalog.is_kitchen_item("Tea") is True
        assert ItemCatalog.is_kitchen_item("Water") is False

    def test_unknown_items_are_treated_as_kitchen_items(self, menu):
        assert ItemCatalog.is_kitchen_item("Chef Special") is True

    def test_item_id_and_code(self, menu):
        assert ItemCatalog.item_id_of("Tea") == menu["tea"].id
        assert ItemCatalog.item_code_of("Tea") == "T01"
        assert ItemCatalog.item_id_of("Dosa") is None
        assert ItemCatalog.item_code_of("Dosa") is None


@pytest.mark.django_db
class TestNameLookupService:

    def test_names_resolve(self, dining_tables, customer, waiter, bank):
        assert NameLookupService.table_name(7) == "T7"
        assert NameLookupService.customer_name(customer.id) == "Anita Rao"
        assert NameLookupService.waiter_name(waiter.id) == "Ravi"
        assert NameLookupService.bank_name(bank.id) == "State Bank"

    def test_missing_records_return_none(self, caplog):
        """
        CRITICAL: Verify a failed lookup never raises.

        Value: Response enrichment can't break the operation it decorates
        """
        with caplog.at_level("WARNING", logger="masters.services"):
            assert NameLookupService.table_name(404) is None
            assert NameLookupService.customer_name(404) is None

        assert "Customer 404 not found" in caplog.text

    def test_none_id_returns_none_quietly(self, caplog):
        with caplog.at_level("WARNING", logger="masters.services"):
            assert NameLookupService.waiter_name(None) is None
        assert caplog.text == ""

    def test_bad_id_returns_none(self):
        assert NameLookupService.bank_name("not-a-number") is None
