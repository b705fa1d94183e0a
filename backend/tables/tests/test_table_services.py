"""
Table status derivation and table shifting.
"""
from decimal import Decimal
from threading import Thread, Barrier

import pytest
from django.db import connection

from audit.models import AuditLog
from billing.models import Bill
from billing.services import BillService
from core_backend.exceptions import InvalidShift, NotFound, NothingToClose
from kds.models import KitchenTicket
from kds.services import KitchenTicketService
from orders.services import ProvisionalOrderService
from tables.services import TableStatus, TableStatusService, TableShiftService


@pytest.mark.django_db
class TestTableStatus:

    def test_status_follows_the_visit(self, menu, waiter, cashier):
        """
        CRITICAL: Verify status is derived from the open bill and pending lines.

        Scenario:
        - Empty table: Available
        - Line added: Ongoing
        - Table closed: Closed
        - More lines while closed: still Closed
        - Bill paid with lines pending: Ongoing
        - Pending lines cleared: Available
        """
        assert TableStatusService.status(7) == TableStatus.AVAILABLE

        ProvisionalOrderService.add_or_update(7, "Tea", 1, waiter.id)
        assert TableStatusService.status(7) == TableStatus.ONGOING

        bill = BillService.close_table(7, waiter.id, cashier.id)
        assert TableStatusService.status(7) == TableStatus.CLOSED

        ProvisionalOrderService.add_or_update(7, "Samosa", 1, waiter.id)
        assert TableStatusService.status(7) == TableStatus.CLOSED

        BillService.mark_paid(bill.bill_no)
        assert TableStatusService.status(7) == TableStatus.ONGOING

        ProvisionalOrderService.clear_for_table(7)
        assert TableStatusService.status(7) == TableStatus.AVAILABLE

    def test_status_reads_do_not_change_state(self, menu, waiter):
        ProvisionalOrderService.add_or_update(5, "Tea", 1, waiter.id)

        assert TableStatusService.status(5) == TableStatusService.status(5) == TableStatus.ONGOING

    def test_statuses_for_many_tables(self, menu, waiter, cashier):
        ProvisionalOrderService.add_or_update(1, "Tea", 1, waiter.id)
        ProvisionalOrderService.add_or_update(2, "Tea", 1, waiter.id)
        BillService.close_table(2, waiter.id, cashier.id)

        assert TableStatusService.statuses([1, 2, 3]) == {
            1: TableStatus.ONGOING,
            2: TableStatus.CLOSED,
            3: TableStatus.AVAILABLE,
        }

    def test_table_grid(self, dining_tables, menu, waiter):
        ProvisionalOrderService.add_or_update(6, "Tea", 1, waiter.id)

        grid = TableStatusService.table_grid(section="garden")

        assert [row["table_no"] for row in grid] == [6, 7, 8, 9, 10]
        assert grid[0] == {"table_no": 6, "name": "T6", "section": "Garden", "status": TableStatus.ONGOING}


@pytest.mark.django_db
class TestTableShift:

    @pytest.fixture
    def busy_table_3(self, menu, waiter, cashier, dining_tables):
        """Table 3 with an open bill, a sent ticket and two pending lines"""
        ProvisionalOrderService.add_or_update(3, "Tea", 2, waiter.id)
        BillService.close_table(3, waiter.id, cashier.id)
        ProvisionalOrderService.add_or_update(3, "Samosa", 1, waiter.id)
        ProvisionalOrderService.add_or_update(3, "Water", 1, waiter.id)
        KitchenTicketService.send_pending_for_table(3)

    def test_shift_moves_everything(self, busy_table_3, cashier, django_capture_on_commit_callbacks):
        """
        CRITICAL: Verify a shift moves lines, the open bill and tickets together.

        Scenario:
        - Table 3: open bill, 2 pending lines, 1 kitchen ticket
        - Shift 3 -> 9
        - Expected: table 3 Available, table 9 Closed with all of it
        """
        bill_no = BillService.closed_bill_for_table(3).bill_no

        with django_capture_on_commit_callbacks(execute=True):
            result = TableShiftService.shift(3, 9, user_id=cashier.id)

        assert result == {
            "source_table_no": 3,
            "target_table_no": 9,
            "lines_moved": 2,
            "bill_no": bill_no,
            "tickets_moved": 1,
        }
        assert TableStatusService.status(3) == TableStatus.AVAILABLE
        assert TableStatusService.status(9) == TableStatus.CLOSED
        assert Bill.objects.get(pk=bill_no).table_no == 9
        assert len(ProvisionalOrderService.lines_for_table(9)) == 2
        assert set(KitchenTicket.objects.values_list("table_no", "table_name")) == {(9, "T9")}

        table_log = AuditLog.objects.get(entity_type="Table")
        assert table_log.entity_id == "3"
        assert table_log.action == AuditLog.Action.SHIFT
        assert AuditLog.objects.filter(entity_type="Bill", action=AuditLog.Action.SHIFT).count() == 1

    def test_shift_lines_only(self, menu, waiter):
        ProvisionalOrderService.add_or_update(3, "Tea", 1, waiter.id)

        result = TableShiftService.shift(3, 9)

        assert result["lines_moved"] == 1
        assert result["bill_no"] is None
        assert TableStatusService.status(9) == TableStatus.ONGOING

    @pytest.mark.parametrize("source, target", [(3, 404), (404, 3)])
    def test_unknown_table_rejected(self, menu, waiter, source, target):
        ProvisionalOrderService.add_or_update(3, "Tea", 1, waiter.id)

        with pytest.raises(NotFound):
            TableShiftService.shift(source, target)

        assert len(ProvisionalOrderService.lines_for_table(3)) == 1

    @pytest.mark.parametrize("source, target", [(3, 3), (None, 9), (3, None)])
    def test_invalid_tables(self, source, target):
        with pytest.raises(InvalidShift):
            TableShiftService.shift(source, target)

    def test_target_with_open_bill_rolls_back(self, busy_table_3, waiter, cashier):
        """
        CRITICAL: Verify a rejected shift leaves both tables untouched.
        """
        ProvisionalOrderService.add_or_update(9, "Tea", 1, waiter.id)
        BillService.close_table(9, waiter.id, cashier.id)

        with pytest.raises(InvalidShift):
            TableShiftService.shift(3, 9)

        assert len(ProvisionalOrderService.lines_for_table(3)) == 2
        assert not ProvisionalOrderService.has_lines(9)
        assert KitchenTicket.objects.filter(table_no=3).count() == 1
        assert BillService.closed_bill_for_table(3) is not None


@pytest.mark.django_db(transaction=True)
class TestConcurrentClose:

    def test_concurrent_close_creates_one_bill(self, menu, waiter, cashier, dining_tables):
        """
        CRITICAL: Verify two cashiers closing the same table can't create two bills.

        Scenario:
        - Table 7 has 100.00 of pending items
        - 2 threads close table 7 at the same moment
        - Expected: one bill of 100.00, the other close sees nothing new
        """
        ProvisionalOrderService.add_or_update(7, "Tea", 2, waiter.id)
        ProvisionalOrderService.add_or_update(7, "Samosa", 4, waiter.id)

        results = []
        errors = []
        barrier = Barrier(2)

        def attempt_close():
            try:
                barrier.wait()
                bill = BillService.close_table(7, waiter.id, cashier.id)
                results.append(bill.bill_no)
            except NothingToClose as e:
                errors.append(e.code)
            except Exception as e:
                errors.append(f"unexpected: {e}")
            finally:
                connection.close()

        threads = [Thread(target=attempt_close) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(results) == 1, f"Expected exactly one close to succeed, got {results} / {errors}"
        assert errors == ["nothing_to_close"]
        bill = Bill.objects.get()
        assert bill.bill_amount == Decimal("100.00")
        assert bill.lines.count() == 2
