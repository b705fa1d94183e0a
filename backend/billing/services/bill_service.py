from contextlib import contextmanager
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional
import logging

from django.conf import settings
from django.db.models import Count, Q, Sum
from django.utils import timezone

from audit.models import AuditLog
from audit.services import AuditService
from core_backend.exceptions import (
    CustomerRequired,
    InvalidInput,
    InvalidShift,
    InvalidTransition,
    NoItemsToClose,
    NothingToClose,
    NotFound,
)
from core_backend.infrastructure.locks import table_lock
from core_backend.utils.money import ZERO, line_amount, quantize_money, to_decimal
from masters.services import ItemCatalog, TableDirectory

from ..models import Bill, BillLine, BillStatus, PayMode

logger = logging.getLogger(__name__)


class BillService:
    """
    Bill lifecycle: close a table into a bill, then settle it as PAID or CREDIT.

    Every mutating operation runs under the table lock; a rejected command
    raises before anything is written.
    """

    # Settlement only happens from CLOSE; PAID and CREDIT are terminal
    VALID_STATUS_TRANSITIONS = {
        BillStatus.CLOSE: [BillStatus.PAID, BillStatus.CREDIT],
        BillStatus.PAID: [],
        BillStatus.CREDIT: [],
    }

    SETTLE_PAYMODES = [PayMode.CASH, PayMode.BANK]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _date_format() -> str:
        return getattr(settings, "POS_BILL_DATE_FORMAT", "%d-%m-%Y")

    @staticmethod
    def _time_format() -> str:
        return getattr(settings, "POS_BILL_TIME_FORMAT", "%H:%M:%S")

    @classmethod
    def format_bill_date(cls, value=None) -> str:
        """Storage format for ``bill_date`` (dd-MM-yyyy by default)."""
        if value is None:
            value = timezone.localdate()
        if isinstance(value, str):
            try:
                value = datetime.strptime(value.strip(), cls._date_format()).date()
            except ValueError:
                raise InvalidInput(
                    f"Invalid date '{value}'",
                    {"field": "date", "expected_format": cls._date_format()},
                )
        elif isinstance(value, datetime):
            value = timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
        elif not isinstance(value, date):
            raise InvalidInput(f"Invalid date '{value}'", {"field": "date"})
        return value.strftime(cls._date_format())

    @staticmethod
    def _line_value(line, field, default=None):
        if isinstance(line, dict):
            return line.get(field, default)
        return getattr(line, field, default)

    @classmethod
    def _append_lines(cls, bill: Bill, lines: Iterable) -> List[BillLine]:
        """Add lines after the bill's existing ones. Amounts are computed, never copied."""
        start = bill.lines.count()
        new_lines = []
        for offset, line in enumerate(lines):
            item_name = cls._line_value(line, "item_name")
            if not item_name:
                raise InvalidInput("Every bill line needs an item_name", {"field": "item_name"})
            quantity = to_decimal(cls._line_value(line, "quantity"), "quantity")
            rate = to_decimal(cls._line_value(line, "rate"), "rate")
            item_code = cls._line_value(line, "item_code") or ItemCatalog.item_code_of(item_name) or ""
            new_lines.append(BillLine(
                bill=bill,
                item_name=item_name,
                item_code=item_code,
                quantity=quantity,
                rate=rate,
                amount=line_amount(quantity, rate),
                position=start + offset,
            ))
        BillLine.objects.bulk_create(new_lines)
        return new_lines

    @classmethod
    def _consolidate(cls, lines: Iterable) -> List[Dict]:
        """
        Merge lines with the same item name and rate, summing quantities.
        A reduction entered as its own line folds into its item; items that
        net to zero are dropped. First-seen order is kept.
        """
        merged = {}
        for line in lines:
            item_name = cls._line_value(line, "item_name")
            if not item_name:
                raise InvalidInput("Every bill line needs an item_name", {"field": "item_name"})
            quantity = to_decimal(cls._line_value(line, "quantity"), "quantity")
            rate = to_decimal(cls._line_value(line, "rate"), "rate")

            key = (item_name, rate)
            if key in merged:
                merged[key]["quantity"] += quantity
            else:
                merged[key] = {
                    "item_name": item_name,
                    "item_code": cls._line_value(line, "item_code"),
                    "quantity": quantity,
                    "rate": rate,
                }

        return [line for line in merged.values() if line["quantity"] != 0]

    @staticmethod
    def _check_discount(bill: Bill, discount):
        """Discount must be between zero and the bill's gross amount."""
        if discount < 0:
            raise InvalidInput("discount must not be negative", {"field": "discount", "value": str(discount)})
        if discount > bill.bill_amount:
            raise InvalidInput(
                f"Discount {discount} exceeds bill {bill.bill_no} amount {bill.bill_amount}",
                {"field": "discount", "value": str(discount), "bill_amount": str(bill.bill_amount)},
            )

    @staticmethod
    def snapshot(bill: Bill) -> Dict:
        """Audit snapshot of a bill's totals and lines"""
        return {
            "bill_no": bill.bill_no,
            "table_no": bill.table_no,
            "status": bill.status,
            "paymode": bill.paymode,
            "bill_amount": bill.bill_amount,
            "discount": bill.discount,
            "net_amount": bill.net_amount,
            "cash_received": bill.cash_received,
            "return_amount": bill.return_amount,
            "customer_id": bill.customer_id,
            "bank_id": bill.bank_id,
            "lines": [
                {"item_name": line.item_name, "quantity": line.quantity, "rate": line.rate, "amount": line.amount}
                for line in bill.lines.all()
            ],
        }

    @staticmethod
    def _lock_bill(bill_no) -> Bill:
        try:
            return Bill.objects.select_for_update().get(pk=bill_no)
        except (Bill.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Bill {bill_no} not found", {"bill_no": bill_no})

    @classmethod
    @contextmanager
    def _locked_bill(cls, bill_no, *other_tables):
        """
        Hold the lock of the table a bill belongs to (plus ``other_tables``)
        and yield the row-locked bill.

        A shift can commit between reading the bill's table and taking its
        lock. When the locked bill reports another table, the lock is retaken
        for that table.
        """
        table_no = cls.get_bill(bill_no).table_no
        while True:
            with table_lock(table_no, *other_tables):
                bill = cls._lock_bill(bill_no)
                if bill.table_no == table_no:
                    yield bill
                    return
            logger.debug(f"Bill {bill_no} moved from table {table_no} to {bill.table_no}, relocking")
            table_no = bill.table_no

    @classmethod
    def _check_transition(cls, bill: Bill, new_status):
        if new_status not in cls.VALID_STATUS_TRANSITIONS.get(bill.status, []):
            raise InvalidTransition(
                f"Bill {bill.bill_no} is {bill.status} and cannot be marked {new_status}",
                current_status=bill.status,
                target_status=new_status,
            )

    @staticmethod
    def _end_visit(bill: Bill):
        """Kitchen tickets for the settled visit are no longer needed."""
        from kds.services import KitchenTicketService

        KitchenTicketService.clear_for_table(bill.table_no, sent_before=bill.closed_at)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def get_bill(bill_no) -> Bill:
        try:
            return Bill.objects.prefetch_related("lines").get(pk=bill_no)
        except (Bill.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Bill {bill_no} not found", {"bill_no": bill_no})

    @staticmethod
    def closed_bill_for_table(table_no) -> Optional[Bill]:
        """The table's open (CLOSE) bill, or None."""
        return (
            Bill.objects.open()
            .for_table(table_no)
            .prefetch_related("lines")
            .order_by("-bill_no")
            .first()
        )

    @classmethod
    def combined_lines_for_table(cls, table_no) -> List[Dict]:
        """
        What the waiter screen shows for a table: the open bill's lines
        (reported with negative ids so they can't be confused with
        provisional line ids) followed by the provisional lines.
        """
        from orders.services import ProvisionalOrderService

        rows = []
        bill = cls.closed_bill_for_table(table_no)
        if bill is not None:
            for line in bill.lines.all():
                rows.append({
                    "id": -line.id,
                    "table_no": table_no,
                    "item_name": line.item_name,
                    "quantity": line.quantity,
                    "rate": line.rate,
                    "amount": line.amount,
                    "billed": True,
                    "bill_no": bill.bill_no,
                })

        for line in ProvisionalOrderService.lines_for_table(table_no):
            rows.append({
                "id": line.id,
                "table_no": table_no,
                "item_name": line.item_name,
                "quantity": line.quantity,
                "rate": line.rate,
                "amount": line.amount,
                "billed": False,
                "waiter_id": line.waiter_id,
                "sent_quantity": line.sent_quantity,
            })
        return rows

    # ------------------------------------------------------------------
    # Close
    # ------------------------------------------------------------------

    @classmethod
    def close_table(
        cls,
        table_no,
        waiter_id,
        user_id,
        customer_id=None,
        pending_lines: Optional[Iterable] = None,
        remarks: str = "",
    ) -> Bill:
        """
        Move a table's pending lines onto its bill.

        - no open bill + lines: new CLOSE bill
        - open bill + lines: lines appended to it, totals recomputed
        - open bill, no lines: NothingToClose
        - no open bill, no lines: NoItemsToClose
        - unknown table: NotFound

        ``pending_lines`` defaults to the table's provisional lines. Lines for
        the same item and rate are merged first, so a batch that nets to
        nothing counts as no lines. On success the provisional store for the
        table is cleared.
        """
        from orders.services import ProvisionalOrderService

        if table_no is None:
            raise InvalidInput("table_no is required", {"field": "table_no"})
        if waiter_id is None:
            raise InvalidInput("waiter_id is required", {"field": "waiter_id"})
        TableDirectory.require(table_no)

        with table_lock(table_no):
            if pending_lines is None:
                pending_lines = ProvisionalOrderService.lines_for_table(table_no)
            pending_lines = cls._consolidate(pending_lines)

            bill = Bill.objects.select_for_update().open().for_table(table_no).first()

            if not pending_lines:
                if bill is not None:
                    logger.warning(f"Close rejected for table {table_no}: bill {bill.bill_no} has nothing new")
                    raise NothingToClose(
                        f"Table {table_no} is already closed on bill {bill.bill_no} and has no new items",
                        {"table_no": table_no, "bill_no": bill.bill_no},
                    )
                logger.warning(f"Close rejected for table {table_no}: no items")
                raise NoItemsToClose(f"Table {table_no} has no items to close", {"table_no": table_no})

            now = timezone.now()
            if bill is None:
                local_now = timezone.localtime(now)
                bill = Bill.objects.create(
                    table_no=table_no,
                    waiter_id=waiter_id,
                    user_id=user_id,
                    customer_id=customer_id,
                    status=BillStatus.CLOSE,
                    paymode=PayMode.PENDING,
                    bill_date=local_now.strftime(cls._date_format()),
                    bill_time=local_now.strftime(cls._time_format()),
                    closed_at=now,
                    remarks=remarks or "",
                )
                action = AuditLog.Action.CREATE
                old_values = None
            else:
                old_values = cls.snapshot(bill)
                action = AuditLog.Action.UPDATE
                if customer_id is not None:
                    bill.customer_id = customer_id
                if remarks:
                    bill.remarks = remarks
                bill.closed_at = now

            cls._append_lines(bill, pending_lines)
            bill.recalculate_totals()
            bill.save()

            ProvisionalOrderService.clear_for_table(table_no)

            logger.info(
                f"Closed table {table_no} on bill {bill.bill_no} "
                f"({'new' if action == AuditLog.Action.CREATE else 'appended'}, total {bill.bill_amount})"
            )
            AuditService.record(
                "Bill",
                bill.bill_no,
                action,
                details=f"Table {table_no} closed with {len(pending_lines)} line(s)",
                actor=user_id,
                old_values=old_values,
                new_values=cls.snapshot(bill),
            )

        return bill

    # ------------------------------------------------------------------
    # Settle
    # ------------------------------------------------------------------

    @classmethod
    def mark_paid(
        cls,
        bill_no,
        cash_received=None,
        return_amount=None,
        discount=None,
        paymode=PayMode.CASH,
        bank_id=None,
        user_id=None,
    ) -> Bill:
        """
        Settle a CLOSE bill as PAID.

        ``net_amount`` becomes gross - discount. With no explicit discount,
        any shortfall of ``cash_received - return_amount`` (floored at zero)
        against the gross is taken as the discount.

        Raises:
            InvalidInput: unknown paymode, or a discount outside 0..gross
            InvalidTransition: bill is not CLOSE
        """
        paymode = (paymode or PayMode.CASH).upper()
        if paymode not in cls.SETTLE_PAYMODES:
            raise InvalidInput(
                f"paymode must be one of {', '.join(cls.SETTLE_PAYMODES)}",
                {"field": "paymode", "value": paymode},
            )

        with cls._locked_bill(bill_no) as bill:
            cls._check_transition(bill, BillStatus.PAID)
            old_values = cls.snapshot(bill)

            cash_received = to_decimal(cash_received, "cash_received") if cash_received is not None else bill.bill_amount
            return_amount = to_decimal(return_amount, "return_amount") if return_amount is not None else ZERO

            if discount is None:
                # Change handed back beyond the cash taken counts as nothing received
                received = max(cash_received - return_amount, ZERO)
                discount = bill.bill_amount - received if received < bill.bill_amount else ZERO
            else:
                discount = to_decimal(discount, "discount")
            cls._check_discount(bill, discount)

            bill.cash_received = quantize_money(cash_received)
            bill.return_amount = quantize_money(return_amount)
            bill.discount = quantize_money(discount)
            bill.net_amount = bill.bill_amount - bill.discount
            bill.paymode = paymode
            bill.bank_id = bank_id
            bill.status = BillStatus.PAID
            bill.save()

            logger.info(f"Bill {bill.bill_no} paid by {paymode}: net {bill.net_amount}")
            AuditService.record(
                "Bill",
                bill.bill_no,
                AuditLog.Action.PAID,
                details=f"Paid by {paymode}, received {bill.cash_received}, returned {bill.return_amount}",
                actor=user_id,
                old_values=old_values,
                new_values=cls.snapshot(bill),
            )
            cls._end_visit(bill)

        return bill

    @classmethod
    def mark_credit(
        cls,
        bill_no,
        customer_id,
        cash_received=None,
        return_amount=None,
        discount=None,
        user_id=None,
    ) -> Bill:
        """
        Settle a CLOSE bill on the customer's account.

        Raises:
            CustomerRequired: ``customer_id`` missing (nothing is changed)
            InvalidInput: discount outside 0..gross
        """
        if customer_id is None or customer_id == "":
            raise CustomerRequired()

        with cls._locked_bill(bill_no) as bill:
            cls._check_transition(bill, BillStatus.CREDIT)
            old_values = cls.snapshot(bill)

            bill.cash_received = quantize_money(cash_received) if cash_received is not None else ZERO
            bill.return_amount = quantize_money(return_amount) if return_amount is not None else ZERO
            discount = to_decimal(discount, "discount") if discount is not None else ZERO
            cls._check_discount(bill, discount)
            bill.discount = quantize_money(discount)
            bill.net_amount = bill.bill_amount - bill.discount
            bill.customer_id = customer_id
            bill.paymode = PayMode.CREDIT
            bill.status = BillStatus.CREDIT
            bill.save()

            logger.info(f"Bill {bill.bill_no} put on credit for customer {customer_id}: net {bill.net_amount}")
            AuditService.record(
                "Bill",
                bill.bill_no,
                AuditLog.Action.CREDIT,
                details=f"Credit to customer {customer_id}",
                actor=user_id,
                old_values=old_values,
                new_values=cls.snapshot(bill),
            )
            cls._end_visit(bill)

        return bill

    # ------------------------------------------------------------------
    # Shift / correction
    # ------------------------------------------------------------------

    @classmethod
    def shift_bill(cls, bill_no, target_table_no, user_id=None) -> Bill:
        """
        Move an open bill to another table.

        Raises:
            InvalidTransition: bill already PAID/CREDIT
            InvalidShift: target is the same table or already has an open bill
        """
        if target_table_no is None:
            raise InvalidShift(
                f"Cannot shift bill {bill_no} without a target table",
                {"bill_no": bill_no, "target_table_no": target_table_no},
            )

        with cls._locked_bill(bill_no, target_table_no) as bill:
            if bill.table_no == target_table_no:
                raise InvalidShift(
                    f"Cannot shift bill {bill_no} to table {target_table_no}",
                    {"bill_no": bill_no, "target_table_no": target_table_no},
                )
            if not bill.is_open:
                raise InvalidTransition(
                    f"Only an open bill can be shifted; bill {bill.bill_no} is {bill.status}",
                    current_status=bill.status,
                )
            if Bill.objects.open().for_table(target_table_no).exists():
                raise InvalidShift(
                    f"Table {target_table_no} already has an open bill",
                    {"bill_no": bill_no, "target_table_no": target_table_no},
                )

            source_table_no = bill.table_no
            bill.table_no = target_table_no
            bill.save(update_fields=["table_no", "updated_at"])

            logger.info(f"Shifted bill {bill.bill_no} from table {source_table_no} to {target_table_no}")
            AuditService.record(
                "Bill",
                bill.bill_no,
                AuditLog.Action.SHIFT,
                details=f"Shifted from table {source_table_no} to {target_table_no}",
                actor=user_id,
                old_values={"table_no": source_table_no},
                new_values={"table_no": target_table_no},
            )

        return bill

    @classmethod
    def update_bill(
        cls,
        bill_no,
        lines: Iterable,
        discount=None,
        cash_received=None,
        return_amount=None,
        paymode=None,
        customer_id=None,
        bank_id=None,
        remarks=None,
        user_id=None,
    ) -> Bill:
        """
        Correction override: replace a bill's lines and payment fields.

        Bypasses the status machine. The bill ends PAID, or CREDIT when
        ``paymode`` is CREDIT (which needs a customer).
        """
        lines = list(lines or [])
        if not lines:
            raise InvalidInput("A corrected bill needs at least one line", {"field": "lines"})

        paymode = paymode.upper() if paymode else None
        if paymode is not None and paymode not in PayMode.values:
            raise InvalidInput(f"Unknown paymode '{paymode}'", {"field": "paymode"})

        with cls._locked_bill(bill_no) as bill:
            old_values = cls.snapshot(bill)

            if customer_id is not None:
                bill.customer_id = customer_id
            if paymode == PayMode.CREDIT and bill.customer_id is None:
                raise CustomerRequired()

            bill.lines.all().delete()
            cls._append_lines(bill, lines)

            if discount is not None:
                bill.discount = quantize_money(discount)
            if cash_received is not None:
                bill.cash_received = quantize_money(cash_received)
            if return_amount is not None:
                bill.return_amount = quantize_money(return_amount)
            if bank_id is not None:
                bill.bank_id = bank_id
            if remarks is not None:
                bill.remarks = remarks

            if paymode == PayMode.CREDIT:
                bill.status = BillStatus.CREDIT
                bill.paymode = PayMode.CREDIT
            else:
                bill.status = BillStatus.PAID
                if paymode in cls.SETTLE_PAYMODES:
                    bill.paymode = paymode
                elif bill.paymode not in cls.SETTLE_PAYMODES:
                    bill.paymode = PayMode.CASH

            bill.recalculate_totals()
            cls._check_discount(bill, bill.discount)
            bill.save()

            logger.info(f"Bill {bill.bill_no} overridden: {len(lines)} line(s), net {bill.net_amount}")
            AuditService.record(
                "Bill",
                bill.bill_no,
                AuditLog.Action.OVERRIDE,
                details="Bill corrected",
                actor=user_id,
                old_values=old_values,
                new_values=cls.snapshot(bill),
            )

        return bill

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @classmethod
    def search_bills(cls, bill_no=None, date=None, customer_id=None, status=None) -> List[Bill]:
        """
        Historical (PAID/CREDIT) bills by number, by date or by customer.
        Open bills are never returned.
        """
        queryset = Bill.objects.settled().prefetch_related("lines")

        if bill_no is not None and bill_no != "":
            queryset = queryset.filter(bill_no=bill_no)
        elif date:
            queryset = queryset.filter(bill_date=cls.format_bill_date(date))
            if customer_id is not None:
                queryset = queryset.filter(customer_id=customer_id)
            if status:
                status = str(status).strip().upper()
                if status not in (BillStatus.PAID, BillStatus.CREDIT):
                    raise InvalidInput(
                        "status filter must be PAID or CREDIT",
                        {"field": "status", "value": status},
                    )
                queryset = queryset.filter(status=status)
        elif customer_id is not None:
            queryset = queryset.filter(customer_id=customer_id)
        else:
            raise InvalidInput("Search needs a bill number, a date or a customer")

        return list(queryset.order_by("-bill_no"))

    @classmethod
    def todays_summary(cls, today=None) -> Dict:
        """Cash (PAID) and credit (CREDIT) totals for the day's bills"""
        bill_date = cls.format_bill_date(today)
        totals = Bill.objects.filter(bill_date=bill_date).aggregate(
            total_cash=Sum("bill_amount", filter=Q(status=BillStatus.PAID)),
            total_credit=Sum("bill_amount", filter=Q(status=BillStatus.CREDIT)),
            bill_count=Count("bill_no", filter=Q(status__in=[BillStatus.PAID, BillStatus.CREDIT])),
        )
        total_cash = totals["total_cash"] or ZERO
        total_credit = totals["total_credit"] or ZERO

        return {
            "date": bill_date,
            "total_cash": quantize_money(total_cash),
            "total_credit": quantize_money(total_credit),
            "total_amount": quantize_money(total_cash + total_credit),
            "bill_count": totals["bill_count"] or 0,
        }
