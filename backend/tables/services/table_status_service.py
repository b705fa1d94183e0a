from typing import Dict, Iterable, List, Optional

from django.db import models

from billing.models import Bill
from masters.models import DiningTable
from orders.models import TempOrderLine


class TableStatus(models.TextChoices):
    AVAILABLE = "Available", "Available"
    ONGOING = "Ongoing", "Ongoing"
    CLOSED = "Closed", "Closed"


class TableStatusService:
    """
    Derives a table's status from its open bill and provisional lines.

    Status is never stored; every call reads the latest committed state.
    """

    @staticmethod
    def status(table_no) -> str:
        if Bill.objects.open().for_table(table_no).exists():
            return TableStatus.CLOSED
        if TempOrderLine.objects.for_table(table_no).exists():
            return TableStatus.ONGOING
        return TableStatus.AVAILABLE

    @staticmethod
    def statuses(table_nos: Iterable[int]) -> Dict[int, str]:
        """Status for many tables with two queries"""
        table_nos = list(table_nos)
        closed = set(
            Bill.objects.open().filter(table_no__in=table_nos).values_list("table_no", flat=True)
        )
        ongoing = set(
            TempOrderLine.objects.filter(table_no__in=table_nos).values_list("table_no", flat=True)
        )

        result = {}
        for table_no in table_nos:
            if table_no in closed:
                result[table_no] = TableStatus.CLOSED
            elif table_no in ongoing:
                result[table_no] = TableStatus.ONGOING
            else:
                result[table_no] = TableStatus.AVAILABLE
        return result

    @classmethod
    def table_grid(cls, section: Optional[str] = None) -> List[Dict]:
        """Every active table with its status, for the floor view"""
        tables = DiningTable.objects.filter(is_active=True)
        if section:
            tables = tables.filter(section__iexact=section)
        tables = list(tables.order_by("id"))

        statuses = cls.statuses(table.id for table in tables)
        return [
            {
                "table_no": table.id,
                "name": table.name,
                "section": table.section,
                "status": statuses[table.id],
            }
            for table in tables
        ]
