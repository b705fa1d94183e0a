from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
import logging

from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import InvalidInput, InvalidTransition, NotFound
from core_backend.infrastructure.locks import table_lock
from core_backend.utils.money import to_decimal
from masters.services import ItemCatalog, NameLookupService, TableDirectory

from ..models import KitchenTicket, KitchenTicketLine, KitchenTicketStatus

logger = logging.getLogger(__name__)


class KitchenTicketService:
    """Centralized business logic for kitchen order tickets (KOTs)"""

    # Tickets only move forward
    VALID_TRANSITIONS = {
        KitchenTicketStatus.SENT: [KitchenTicketStatus.READY],
        KitchenTicketStatus.READY: [KitchenTicketStatus.SERVE],
        KitchenTicketStatus.SERVE: [],
    }

    @staticmethod
    def _line_value(line, field, default=None):
        if isinstance(line, dict):
            return line.get(field, default)
        return getattr(line, field, default)

    @classmethod
    @transaction.atomic
    def send(cls, table_no, table_name, waiter_id, lines: Iterable) -> KitchenTicket:
        """
        Create a SENT ticket for a table.

        ``lines`` may be dicts or objects exposing ``item_name``, ``quantity``
        and ``rate`` (``item_id`` optional). Their values are copied onto the
        ticket; later changes to the source lines do not touch it.
        """
        if table_no is None:
            raise InvalidInput("table_no is required", {"field": "table_no"})

        snapshot = []
        for line in lines:
            item_name = cls._line_value(line, 'item_name')
            if not item_name:
                raise InvalidInput("Every ticket line needs an item_name", {"field": "item_name"})
            quantity = to_decimal(cls._line_value(line, 'quantity'), 'quantity')
            if quantity <= 0:
                raise InvalidInput(
                    f"Ticket quantity for {item_name} must be positive",
                    {"item_name": item_name, "quantity": str(quantity)},
                )
            snapshot.append({
                'item_id': cls._line_value(line, 'item_id'),
                'item_name': item_name,
                'quantity': quantity,
                'rate': to_decimal(cls._line_value(line, 'rate', Decimal('0')), 'rate'),
            })

        if not snapshot:
            raise InvalidInput("No items to send to the kitchen")

        ticket = KitchenTicket.objects.create(
            table_no=table_no,
            table_name=table_name or '',
            waiter_id=waiter_id,
            status=KitchenTicketStatus.SENT,
            item_count=len(snapshot),
            total_quantity=sum((line['quantity'] for line in snapshot), Decimal('0')),
            sent_at=timezone.now(),
        )
        KitchenTicketLine.objects.bulk_create([
            KitchenTicketLine(ticket=ticket, position=position, **line)
            for position, line in enumerate(snapshot)
        ])

        logger.info(f"Sent KOT {ticket.id} for table {table_no} with {ticket.item_count} items")

        from ..events.publishers import KitchenTicketEventPublisher
        KitchenTicketEventPublisher.ticket_created(ticket)
        return ticket

    @classmethod
    def send_pending_for_table(cls, table_no, waiter_id=None, table_name: Optional[str] = None) -> KitchenTicket:
        """
        Print a KOT with every kitchen quantity on the table not yet sent,
        then mark those lines as printed.

        Raises:
            NotFound: no such table
            InvalidInput: nothing new to send
        """
        from orders.services import ProvisionalOrderService

        table = TableDirectory.require(table_no)

        with table_lock(table_no):
            pending = ProvisionalOrderService.printable_lines(table_no)
            if not pending:
                raise InvalidInput(f"No new kitchen items to send for table {table_no}")

            if not table_name:
                table_name = table.name

            ticket = cls.send(
                table_no,
                table_name,
                waiter_id if waiter_id is not None else pending[0].waiter_id,
                [
                    {
                        'item_id': ItemCatalog.item_id_of(line.item_name),
                        'item_name': line.item_name,
                        'quantity': line.pending_quantity,
                        'rate': line.rate,
                    }
                    for line in pending
                ],
            )
            ProvisionalOrderService.mark_printed(table_no, [line.id for line in pending])

        return ticket

    @staticmethod
    def get(ticket_id) -> KitchenTicket:
        try:
            return KitchenTicket.objects.get_optimized_queryset().get(pk=ticket_id)
        except (KitchenTicket.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Kitchen ticket {ticket_id} not found", {"ticket_id": ticket_id})

    @classmethod
    def _transition(cls, ticket_id, new_status: str) -> KitchenTicket:
        with transaction.atomic():
            try:
                ticket = KitchenTicket.objects.select_for_update().get(pk=ticket_id)
            except (KitchenTicket.DoesNotExist, ValueError, TypeError):
                raise NotFound(f"Kitchen ticket {ticket_id} not found", {"ticket_id": ticket_id})

            logger.info(f"Transitioning KOT {ticket.id} from {ticket.status} to {new_status}")

            if new_status not in cls.VALID_TRANSITIONS.get(ticket.status, []):
                logger.warning(f"Invalid transition for KOT {ticket.id} from {ticket.status} to {new_status}")
                raise InvalidTransition(
                    f"Cannot move kitchen ticket {ticket.id} from {ticket.status} to {new_status}",
                    current_status=ticket.status,
                    target_status=new_status,
                )

            old_status = ticket.status
            ticket.status = new_status

            # Set timestamps
            now = timezone.now()
            if new_status == KitchenTicketStatus.READY:
                ticket.ready_at = now
            elif new_status == KitchenTicketStatus.SERVE:
                ticket.served_at = now

            ticket.save(update_fields=['status', 'ready_at', 'served_at'])

            from ..events.publishers import KitchenTicketEventPublisher
            KitchenTicketEventPublisher.ticket_status_changed(ticket, old_status, new_status)

        return ticket

    @classmethod
    def mark_ready(cls, ticket_id) -> KitchenTicket:
        """SENT -> READY"""
        return cls._transition(ticket_id, KitchenTicketStatus.READY)

    @classmethod
    def mark_serve(cls, ticket_id) -> KitchenTicket:
        """READY -> SERVE"""
        return cls._transition(ticket_id, KitchenTicketStatus.SERVE)

    @classmethod
    def _bulk_transition(cls, table_no, from_status, transition) -> List[KitchenTicket]:
        """
        Apply ``transition`` to every ticket on the table in ``from_status``,
        oldest first. Each ticket commits on its own; a ticket that moved
        underneath us is skipped.
        """
        ticket_ids = list(
            KitchenTicket.objects.filter(table_no=table_no, status=from_status)
            .order_by('sent_at', 'id')
            .values_list('id', flat=True)
        )

        changed = []
        for ticket_id in ticket_ids:
            try:
                changed.append(transition(ticket_id))
            except (InvalidTransition, NotFound) as e:
                logger.warning(f"Skipping KOT {ticket_id} on table {table_no}: {e}")

        logger.info(f"Bulk transitioned {len(changed)}/{len(ticket_ids)} tickets on table {table_no}")
        return changed

    @classmethod
    def mark_all_ready_for_table(cls, table_no) -> List[KitchenTicket]:
        return cls._bulk_transition(table_no, KitchenTicketStatus.SENT, cls.mark_ready)

    @classmethod
    def mark_all_served_for_table(cls, table_no) -> List[KitchenTicket]:
        return cls._bulk_transition(table_no, KitchenTicketStatus.READY, cls.mark_serve)

    @staticmethod
    def group_by_table(tickets: Iterable[KitchenTicket]) -> Dict[int, List[KitchenTicket]]:
        """Group tickets by table, keeping tables in order of first appearance"""
        grouped = OrderedDict()
        for ticket in tickets:
            grouped.setdefault(ticket.table_no, []).append(ticket)
        return grouped

    @classmethod
    def list_pending(cls) -> Dict[int, List[KitchenTicket]]:
        return cls.group_by_table(KitchenTicket.objects.pending())

    @classmethod
    def list_ready(cls) -> Dict[int, List[KitchenTicket]]:
        return cls.group_by_table(KitchenTicket.objects.ready())

    @classmethod
    def list_all(cls) -> Dict[int, List[KitchenTicket]]:
        return cls.group_by_table(KitchenTicket.objects.get_optimized_queryset())

    @staticmethod
    def tickets_for_table(table_no) -> List[KitchenTicket]:
        return list(KitchenTicket.objects.for_table(table_no))

    @staticmethod
    @transaction.atomic
    def clear_for_table(table_no, sent_before=None) -> int:
        """
        Delete the tickets for a table (lines cascade). With ``sent_before``,
        only tickets sent up to that moment are removed. Returns the ticket count.
        """
        tickets = KitchenTicket.objects.filter(table_no=table_no)
        if sent_before is not None:
            tickets = tickets.filter(sent_at__lte=sent_before)

        count = tickets.count()
        if not count:
            return 0

        tickets.delete()
        logger.info(f"Cleared {count} kitchen tickets for table {table_no}")

        from ..events.publishers import KitchenTicketEventPublisher
        KitchenTicketEventPublisher.tickets_cleared(table_no, count)
        return count

    @staticmethod
    @transaction.atomic
    def shift_to_table(source_table_no, target_table_no, target_table_name: Optional[str] = None) -> int:
        """Move a table's tickets to another table. Returns the number moved."""
        if source_table_no == target_table_no:
            return 0

        if not target_table_name:
            target_table_name = NameLookupService.table_name(target_table_no) or f"Table {target_table_no}"

        moved = KitchenTicket.objects.filter(table_no=source_table_no).update(
            table_no=target_table_no,
            table_name=target_table_name,
        )
        logger.info(f"Shifted {moved} kitchen tickets from table {source_table_no} to {target_table_no}")

        if moved:
            from ..events.publishers import KitchenTicketEventPublisher
            KitchenTicketEventPublisher.tickets_shifted(source_table_no, target_table_no, moved)
        return moved
