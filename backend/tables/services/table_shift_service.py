from typing import Dict, Optional
import logging

from audit.models import AuditLog
from audit.services import AuditService
from billing.services import BillService
from core_backend.exceptions import InvalidShift
from core_backend.infrastructure.locks import table_lock
from kds.services import KitchenTicketService
from masters.services import TableDirectory
from orders.services import ProvisionalOrderService

logger = logging.getLogger(__name__)


class TableShiftService:
    """
    Moves a table's work (provisional lines, open bill, kitchen tickets) to
    another table.
    """

    @staticmethod
    def shift(source_table_no, target_table_no, target_table_name: Optional[str] = None, user_id=None) -> Dict:
        """
        Shift everything from ``source_table_no`` to ``target_table_no``.

        Both tables are locked and every step runs in one transaction, so a
        failure part way leaves both tables as they were.

        Raises:
            InvalidShift: missing or equal table numbers, or the target
                already has an open bill while the source has one too
            NotFound: either table does not exist
        """
        if source_table_no is None or target_table_no is None:
            raise InvalidShift("Source and target tables are required")
        if source_table_no == target_table_no:
            raise InvalidShift(
                f"Cannot shift table {source_table_no} onto itself",
                {"source_table_no": source_table_no, "target_table_no": target_table_no},
            )
        TableDirectory.require(source_table_no)
        target = TableDirectory.require(target_table_no)

        with table_lock(source_table_no, target_table_no):
            lines_moved = ProvisionalOrderService.shift_to_table(source_table_no, target_table_no)

            bill = BillService.closed_bill_for_table(source_table_no)
            bill_no = None
            if bill is not None:
                bill_no = BillService.shift_bill(bill.bill_no, target_table_no, user_id=user_id).bill_no

            if not target_table_name:
                target_table_name = target.name
            tickets_moved = KitchenTicketService.shift_to_table(
                source_table_no, target_table_no, target_table_name
            )

            logger.info(
                f"Shifted table {source_table_no} -> {target_table_no}: "
                f"{lines_moved} lines, bill {bill_no}, {tickets_moved} tickets"
            )
            AuditService.record(
                "Table",
                source_table_no,
                AuditLog.Action.SHIFT,
                details=f"Shifted to table {target_table_no}",
                actor=user_id,
                new_values={
                    "target_table_no": target_table_no,
                    "lines_moved": lines_moved,
                    "bill_no": bill_no,
                    "tickets_moved": tickets_moved,
                },
            )

        return {
            "source_table_no": source_table_no,
            "target_table_no": target_table_no,
            "lines_moved": lines_moved,
            "bill_no": bill_no,
            "tickets_moved": tickets_moved,
        }
