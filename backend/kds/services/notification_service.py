from typing import Dict, Any
import logging
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync
from django.conf import settings

logger = logging.getLogger(__name__)


def sanitize_group_name(value) -> str:
    """Channels group names only allow ASCII alphanumerics, hyphens, underscores and periods"""
    return ''.join(c if c.isalnum() or c in '-_.' else '_' for c in str(value))


def table_group_name(table_no) -> str:
    return f'kitchen_table_{sanitize_group_name(table_no)}'


class KitchenNotificationService:
    """Service for pushing kitchen ticket events to WebSocket subscribers"""

    def __init__(self):
        self.channel_layer = get_channel_layer()

    @property
    def kitchen_group(self) -> str:
        return sanitize_group_name(getattr(settings, 'POS_KITCHEN_GROUP', 'kitchen_display'))

    def notify_group(self, group_name: str, message_type: str, data: Dict[str, Any]):
        """Send notification to a single channels group"""
        if not self.channel_layer:
            logger.warning("No channel layer available for notifications")
            return

        try:
            logger.debug(f"Sending {message_type} to group {group_name}")

            async_to_sync(self.channel_layer.group_send)(
                group_name,
                {
                    'type': 'kitchen_notification',
                    'message_type': message_type,
                    'data': data,
                }
            )

        except Exception as e:
            logger.error(f"Error sending {message_type} notification to group {group_name}: {e}")

    def notify_kitchen(self, message_type: str, data: Dict[str, Any]):
        """Send notification to every kitchen display"""
        self.notify_group(self.kitchen_group, message_type, data)

    def notify_table(self, table_no, message_type: str, data: Dict[str, Any]):
        """Send notification to floor devices following one table"""
        self.notify_group(table_group_name(table_no), message_type, data)

    def on_kitchen_ticket_status_changed(self, ticket_id, new_status: str, table_no, data: Dict[str, Any] = None):
        """Broadcast a ticket status change to the kitchen and to the table's followers"""
        payload = {
            'ticket_id': ticket_id,
            'status': str(new_status),
            'table_no': table_no,
        }
        if data:
            payload['ticket'] = data

        logger.info(f"Notifying ticket {ticket_id} on table {table_no} -> {new_status}")
        self.notify_kitchen('ticket_status_changed', payload)
        self.notify_table(table_no, 'ticket_status_changed', payload)

    def tickets_cleared_notification(self, table_no, count: int):
        data = {'table_no': table_no, 'count': count}
        self.notify_kitchen('tickets_cleared', data)
        self.notify_table(table_no, 'tickets_cleared', data)

    def tickets_shifted_notification(self, source_table_no, target_table_no, count: int):
        data = {
            'source_table_no': source_table_no,
            'target_table_no': target_table_no,
            'count': count,
        }
        self.notify_kitchen('tickets_shifted', data)
        self.notify_table(source_table_no, 'tickets_shifted', data)
        self.notify_table(target_table_no, 'tickets_shifted', data)


# Global instance
notification_service = KitchenNotificationService()
