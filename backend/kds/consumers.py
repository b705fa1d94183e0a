from channels.generic.websocket import AsyncWebsocketConsumer
from channels.db import database_sync_to_async
import json
import logging

from core_backend.exceptions import POSError
from .services import KitchenTicketService
from .services.notification_service import sanitize_group_name, table_group_name

logger = logging.getLogger(__name__)


class KitchenDisplayConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for kitchen displays and floor devices.

    ``ws/kitchen/`` joins the kitchen-wide group; ``ws/kitchen/table/<n>/``
    follows a single table.
    """

    async def connect(self):
        """Handle WebSocket connection"""
        try:
            from django.conf import settings

            self.table_no = self.scope['url_route']['kwargs'].get('table_no')
            if self.table_no is not None:
                self.group_name = table_group_name(self.table_no)
            else:
                self.group_name = sanitize_group_name(getattr(settings, 'POS_KITCHEN_GROUP', 'kitchen_display'))

            await self.channel_layer.group_add(self.group_name, self.channel_name)
            await self.accept()
            await self.send_initial_data()

            logger.info(f"Kitchen WebSocket connected: group={self.group_name}")

        except Exception as e:
            logger.error(f"Error connecting kitchen WebSocket: {e}")
            await self.close()

    async def disconnect(self, close_code):
        """Handle WebSocket disconnection"""
        try:
            if hasattr(self, 'group_name'):
                await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(f"Kitchen WebSocket disconnected: code={close_code}")
        except Exception as e:
            logger.error(f"Error disconnecting kitchen WebSocket: {e}")

    async def receive(self, text_data):
        """Handle messages from WebSocket"""
        try:
            data = json.loads(text_data)
            action = data.get('action')

            logger.debug(f"Received kitchen WebSocket action: {action}")

            if action == 'mark_ready':
                await self.handle_transition(data, KitchenTicketService.mark_ready)
            elif action == 'mark_serve':
                await self.handle_transition(data, KitchenTicketService.mark_serve)
            elif action == 'ping':
                await self.send(text_data=json.dumps({'type': 'pong'}))
            elif action == 'refresh_data':
                await self.send_initial_data()
            else:
                await self.send_error(f"Unknown action: {action}")

        except json.JSONDecodeError:
            await self.send_error("Invalid JSON format")
        except Exception as e:
            logger.error(f"Error processing kitchen WebSocket message: {e}")
            await self.send_error(f"Error processing request: {str(e)}")

    async def handle_transition(self, data, transition):
        ticket_id = data.get('ticket_id')
        if not ticket_id:
            await self.send_error("Missing ticket_id")
            return

        try:
            ticket = await database_sync_to_async(transition)(ticket_id)
        except POSError as e:
            await self.send_error(e.message, code=e.code)
            return

        await self.send(text_data=json.dumps({
            'type': 'success',
            'ticket_id': ticket.id,
            'status': ticket.status,
        }))

    @database_sync_to_async
    def _load_tickets(self):
        if self.table_no is not None:
            tickets = KitchenTicketService.tickets_for_table(int(self.table_no))
        else:
            tickets = [
                ticket
                for table_tickets in KitchenTicketService.list_pending().values()
                for ticket in table_tickets
            ]
        return [ticket.to_dict() for ticket in tickets]

    async def send_initial_data(self):
        tickets = await self._load_tickets()
        await self.send(text_data=json.dumps({
            'type': 'initial_data',
            'tickets': tickets,
        }))

    async def send_error(self, message, code=None):
        payload = {'type': 'error', 'message': message}
        if code:
            payload['code'] = code
        await self.send(text_data=json.dumps(payload))

    async def kitchen_notification(self, event):
        """Relay group broadcasts from KitchenNotificationService"""
        await self.send(text_data=json.dumps({
            'type': event['message_type'],
            'data': event['data'],
        }))
