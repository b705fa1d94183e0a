from decimal import Decimal
from typing import List, Optional
import logging

from django.db import transaction
from django.db.models import F, Sum

from core_backend.exceptions import InvalidInput, NotFound
from core_backend.infrastructure.locks import table_lock
from core_backend.utils.money import to_decimal, line_amount
from masters.services import ItemCatalog, TableDirectory

from ..models import TempOrderLine, ReducedItem

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class ProvisionalOrderService:
    """
    Store for a table's unconfirmed order lines.

    Lines are never merged automatically: each add creates one line, and
    updates address a line by its id. All mutations run under the table's
    lock.
    """

    @staticmethod
    def _require(value, field):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise InvalidInput(f"{field} is required", {"field": field})
        return value

    @staticmethod
    def _get_line(line_id) -> TempOrderLine:
        try:
            return TempOrderLine.objects.get(pk=line_id)
        except (TempOrderLine.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Order line {line_id} not found", {"line_id": line_id})

    @staticmethod
    def _check_net_quantity(table_no, item_name, delta):
        """
        Reject a change that would take the table's net quantity of an item
        below zero.
        """
        if delta >= 0:
            return
        lines = TempOrderLine.objects.for_table(table_no).filter(item_name__iexact=item_name)
        current = lines.aggregate(total=Sum("quantity"))["total"] or ZERO
        if current + delta < 0:
            raise InvalidInput(
                f"Cannot reduce {item_name} below zero on table {table_no}",
                {"item_name": item_name, "current_quantity": str(current), "change": str(delta)},
            )

    @staticmethod
    def _record_reduction(table_no, item_name, quantity, rate, waiter_id, user_id, user_name, reason):
        """Write the reduced-after-KOT trail. Never fails the calling mutation."""
        if quantity <= 0:
            return
        try:
            with transaction.atomic():
                ReducedItem.objects.create(
                    table_no=table_no,
                    item_name=item_name,
                    reduced_quantity=quantity,
                    rate=rate,
                    amount=line_amount(quantity, rate),
                    waiter_id=waiter_id,
                    reduced_by_user_id=user_id,
                    reduced_by_user_name=user_name or "",
                    reason=reason or "",
                )
            logger.info(f"Recorded reduction of {quantity} {item_name} on table {table_no}")
        except Exception as e:
            logger.error(f"Failed to record reduced item {item_name} on table {table_no}: {e}")

    @staticmethod
    def _sent_quantity_for_item(table_no, item_name) -> Decimal:
        return (
            TempOrderLine.objects.for_table(table_no)
            .filter(item_name__iexact=item_name)
            .aggregate(total=Sum("sent_quantity"))["total"]
            or ZERO
        )

    @classmethod
    def add_or_update(
        cls,
        table_no,
        item_name,
        quantity,
        waiter_id,
        rate=None,
        line_id=None,
        user_id=None,
        user_name="",
        reason="",
    ) -> TempOrderLine:
        """
        Add a line to a table, or update the existing line ``line_id``.

        ``rate`` defaults to the catalog price. A negative ``quantity`` is a
        reduction; when it takes back quantity already sent to the kitchen a
        ReducedItem is recorded.

        Raises:
            InvalidInput: missing table, item, quantity or waiter, or a
                reduction below zero
            ItemNotFound: rate omitted and item not in the catalog
            NotFound: the table or ``line_id`` does not exist
        """
        cls._require(table_no, "table_no")
        cls._require(item_name, "item_name")
        cls._require(waiter_id, "waiter_id")
        quantity = to_decimal(quantity, "quantity")
        item_name = item_name.strip()

        if line_id is not None:
            return cls.update(line_id, quantity=quantity, rate=rate, user_id=user_id, user_name=user_name, reason=reason)

        if quantity == 0:
            raise InvalidInput("quantity must not be zero", {"field": "quantity"})

        TableDirectory.require(table_no)
        rate =to_decimal(rate, "rate") if rate is not None else ItemCatalog.rate_of(item_name)
        is_kitchen_item = ItemCatalog.is_kitchen_item(item_name)

        with table_lock(table_no):
            cls._check_net_quantity(table_no, item_name, quantity)

            if quantity < 0:
                already_sent = cls._sent_quantity_for_item(table_no, item_name)
                cls._record_reduction(
                    table_no, item_name, min(-quantity, already_sent), rate,
                    waiter_id, user_id, user_name, reason,
                )

            line = TempOrderLine.objects.create(
                table_no=table_no,
                item_name=item_name,
                quantity=quantity,
                rate=rate,
                waiter_id=waiter_id,
                is_kitchen_item=is_kitchen_item,
            )

        logger.info(f"Added {quantity} x {item_name} @ {rate} to table {table_no} (line {line.id})")
        return line

    @classmethod
    def update(cls, line_id, quantity=None, rate=None, user_id=None, user_name="", reason="") -> TempOrderLine:
        """
        Change a line's quantity and/or rate. The amount is recomputed.

        Raises:
            NotFound: line does not exist
        """
        line = cls._get_line(line_id)

        with table_lock(line.table_no):
            # Re-read under the lock
            line = cls._get_line(line_id)
            old_quantity = line.quantity

            if quantity is not None:
                quantity = to_decimal(quantity, "quantity")
                cls._check_net_quantity(line.table_no, line.item_name, quantity - old_quantity)
                line.quantity = quantity
            if rate is not None:
                line.rate = to_decimal(rate, "rate")

            if line.sent_quantity > max(line.quantity, ZERO):
                new_sent = max(line.quantity, ZERO)
                cls._record_reduction(
                    line.table_no, line.item_name, line.sent_quantity - new_sent, line.rate,
                    line.waiter_id, user_id, user_name, reason,
                )
                line.sent_quantity = new_sent

            line.save()

        logger.info(
            f"Updated line {line.id} on table {line.table_no}: "
            f"{line.item_name} {old_quantity} -> {line.quantity} @ {line.rate}"
        )
        return line

    @classmethod
    def remove(cls, line_id, user_id=None, user_name="", reason=""):
        """
        Delete a line.

        Raises:
            NotFound: line does not exist (including a second remove)
        """
        line = cls._get_line(line_id)

        with table_lock(line.table_no):
            line = cls._get_line(line_id)
            cls._check_net_quantity(line.table_no, line.item_name, -line.quantity)
            cls._record_reduction(
                line.table_no, line.item_name, line.sent_quantity, line.rate,
                line.waiter_id, user_id, user_name, reason,
            )
            line.delete()

        logger.info(f"Removed line {line_id} ({line.item_name}) from table {line.table_no}")

    @staticmethod
    def lines_for_table(table_no) -> List[TempOrderLine]:
        return list(TempOrderLine.objects.for_table(table_no).order_by("id"))

    @staticmethod
    def has_lines(table_no) -> bool:
        return TempOrderLine.objects.for_table(table_no).exists()

    @staticmethod
    def clear_for_table(table_no) -> int:
        """Bulk delete a table's lines. Returns the number deleted."""
        with table_lock(table_no):
            count, _ = TempOrderLine.objects.for_table(table_no).delete()
        logger.info(f"Cleared {count} provisional lines for table {table_no}")
        return count

    @staticmethod
    def shift_to_table(source_table_no, target_table_no) -> int:
        """
        Move every line from one table to another. Returns the number moved;
        0 when source and target are the same table.
        """
        if source_table_no == target_table_no:
            return 0
        with table_lock(source_table_no, target_table_no):
            moved = TempOrderLine.objects.for_table(source_table_no).update(table_no=target_table_no)
        logger.info(f"Shifted {moved} provisional lines from table {source_table_no} to {target_table_no}")
        return moved

    @staticmethod
    def printable_lines(table_no) -> List[TempOrderLine]:
        """Kitchen lines with quantity not yet printed on a KOT."""
        return list(TempOrderLine.objects.for_table(table_no).printable().order_by("id"))

    @staticmethod
    def mark_printed(table_no, line_ids: Optional[List[int]] = None) -> int:
        """Record that the printable quantity of the table's lines went to the kitchen."""
        with table_lock(table_no):
            lines = TempOrderLine.objects.for_table(table_no).printable()
            if line_ids is not None:
                lines = lines.filter(pk__in=line_ids)
            updated = lines.update(sent_quantity=F("quantity"))
        logger.debug(f"Marked {updated} lines printed on table {table_no}")
        return updated
