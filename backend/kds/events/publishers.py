import logging
from django.db import transaction
from ..services.notification_service import notification_service

logger = logging.getLogger(__name__)


class KitchenTicketEventPublisher:
    """
    Centralized event publishing for kitchen tickets.

    Publishing is best-effort: a failed push is logged and never reaches the
    caller, so a ticket transition can't fail because a display is offline.
    """

    @staticmethod
    def _after_commit(send, description):
        def safe_send():
            try:
                send()
            except Exception as e:
                logger.error(f"Error sending {description} notification: {e}")

        try:
            # Ensure the database transaction is committed before broadcasting
            if transaction.get_connection().in_atomic_block:
                logger.debug(f"Still in atomic block, deferring {description} notification")
                transaction.on_commit(safe_send)
            else:
                safe_send()
        except Exception as e:
            logger.error(f"Error publishing {description} event: {e}")

    @staticmethod
    def ticket_created(ticket):
        """Publish a new ticket to the kitchen"""
        logger.info(f"Publishing ticket_created event for KOT {ticket.id} (table {ticket.table_no})")
        data = ticket.to_dict()
        KitchenTicketEventPublisher._after_commit(
            lambda: notification_service.on_kitchen_ticket_status_changed(
                ticket.id, ticket.status, ticket.table_no, data
            ),
            'ticket_created',
        )

    @staticmethod
    def ticket_status_changed(ticket, old_status: str, new_status: str):
        """Publish ticket status change event"""
        logger.info(f"Publishing ticket_status_changed event for KOT {ticket.id}: {old_status} -> {new_status}")
        data = ticket.to_dict()
        KitchenTicketEventPublisher._after_commit(
            lambda: notification_service.on_kitchen_ticket_status_changed(
                ticket.id, new_status, ticket.table_no, data
            ),
            'ticket_status_changed',
        )

    @staticmethod
    def tickets_cleared(table_no, count: int):
        logger.info(f"Publishing tickets_cleared event for table {table_no} ({count} tickets)")
        KitchenTicketEventPublisher._after_commit(
            lambda: notification_service.tickets_cleared_notification(table_no, count),
            'tickets_cleared',
        )

    @staticmethod
    def tickets_shifted(source_table_no, target_table_no, count: int):
        logger.info(f"Publishing tickets_shifted event: table {source_table_no} -> {target_table_no} ({count} tickets)")
        KitchenTicketEventPublisher._after_commit(
            lambda: notification_service.tickets_shifted_notification(source_table_no, target_table_no, count),
            'tickets_shifted',
        )
