"""
Kitchen display WebSocket tests.
"""
from decimal import Decimal

import pytest
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator

from core_backend.asgi import application
from kds.models import KitchenTicket, KitchenTicketStatus
from kds.services import KitchenTicketService


def _send(table_no):
    return KitchenTicketService.send(
        table_no, f"T{table_no}", 1, [{"item_name": "Tea", "quantity": 2, "rate": Decimal("20")}]
    )


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestKitchenDisplayConsumer:

    async def test_connect_receives_pending_tickets(self):
        """
        HIGH: Verify a kitchen display gets the current board on connect.
        """
        ticket = await database_sync_to_async(_send)(7)

        communicator = WebsocketCommunicator(application, "/ws/kitchen/")
        connected, _ = await communicator.connect()
        assert connected

        response = await communicator.receive_json_from()
        assert response["type"] == "initial_data"
        assert [t["id"] for t in response["tickets"]] == [ticket.id]

        await communicator.disconnect()

    async def test_table_follower_only_sees_its_table(self):
        await database_sync_to_async(_send)(7)
        mine = await database_sync_to_async(_send)(8)

        communicator = WebsocketCommunicator(application, "/ws/kitchen/table/8/")
        connected, _ = await communicator.connect()
        assert connected

        response = await communicator.receive_json_from()
        assert [t["id"] for t in response["tickets"]] == [mine.id]

        await communicator.disconnect()

    async def test_ping_pong(self):
        communicator = WebsocketCommunicator(application, "/ws/kitchen/")
        await communicator.connect()
        await communicator.receive_json_from()

        await communicator.send_json_to({"action": "ping"})
        response = await communicator.receive_json_from()
        assert response == {"type": "pong"}

        await communicator.disconnect()

    async def test_mark_ready_over_socket(self):
        """
        HIGH: Verify the kitchen can bump a ticket from the display.

        Expected: success reply, status persisted, change broadcast to the board
        """
        ticket = await database_sync_to_async(_send)(7)

        communicator = WebsocketCommunicator(application, "/ws/kitchen/")
        await communicator.connect()
        await communicator.receive_json_from()

        await communicator.send_json_to({"action": "mark_ready", "ticket_id": ticket.id})
        response = await communicator.receive_json_from(timeout=5)
        assert response == {"type": "success", "ticket_id": ticket.id, "status": "READY"}

        broadcast = await communicator.receive_json_from(timeout=5)
        assert broadcast["type"] == "ticket_status_changed"
        assert broadcast["data"]["ticket_id"] == ticket.id

        status = await database_sync_to_async(
            lambda: KitchenTicket.objects.get(pk=ticket.id).status
        )()
        assert status == KitchenTicketStatus.READY

        await communicator.disconnect()

    async def test_invalid_transition_reports_error_code(self):
        ticket = await database_sync_to_async(_send)(7)

        communicator = WebsocketCommunicator(application, "/ws/kitchen/")
        await communicator.connect()
        await communicator.receive_json_from()

        await communicator.send_json_to({"action": "mark_serve", "ticket_id": ticket.id})
        response = await communicator.receive_json_from(timeout=5)
        assert response["type"] == "error"
        assert response["code"] == "invalid_transition"

        await communicator.disconnect()

    async def test_bad_messages(self):
        communicator = WebsocketCommunicator(application, "/ws/kitchen/")
        await communicator.connect()
        await communicator.receive_json_from()

        await communicator.send_to(text_data="not json")
        assert (await communicator.receive_json_from())["message"] == "Invalid JSON format"

        await communicator.send_json_to({"action": "mark_ready"})
        assert (await communicator.receive_json_from())["message"] == "Missing ticket_id"

        await communicator.send_json_to({"action": "dance"})
        assert (await communicator.receive_json_from())["message"] == "Unknown action: dance"

        await communicator.disconnect()
