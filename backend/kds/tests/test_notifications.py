"""
Kitchen notifications are pushed after the ticket change commits and can
never fail the change itself.
"""
from decimal import Decimal

import pytest

from kds.models import KitchenTicket, KitchenTicketStatus
from kds.services import KitchenTicketService, notification_service
from kds.services.notification_service import sanitize_group_name, table_group_name


@pytest.fixture
def sent_messages(monkeypatch):
    """Capture group pushes instead of sending them"""
    messages = []

    def record(group_name, message_type, data):
        messages.append((group_name, message_type, data))

    monkeypatch.setattr(notification_service, "notify_group", record)
    return messages


def _send(table_no=7):
    return KitchenTicketService.send(
        table_no, f"T{table_no}", 1, [{"item_name": "Tea", "quantity": 1, "rate": Decimal("20")}]
    )


class TestGroupNames:

    def test_group_names_are_channels_safe(self):
        assert sanitize_group_name("kitchen display/1") == "kitchen_display_1"
        assert table_group_name(7) == "kitchen_table_7"


@pytest.mark.django_db
class TestTicketNotifications:

    def test_new_ticket_is_pushed_to_kitchen_and_table(self, sent_messages, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            ticket = _send()

        groups = [group for group, _, _ in sent_messages]
        assert groups == ["kitchen_display", "kitchen_table_7"]
        _, message_type, data = sent_messages[0]
        assert message_type == "ticket_status_changed"
        assert data["ticket_id"] == ticket.id
        assert data["status"] == KitchenTicketStatus.SENT
        assert data["ticket"]["lines"][0]["item_name"] == "Tea"

    def test_nothing_is_pushed_before_commit(self, sent_messages, django_capture_on_commit_callbacks):
        """
        CRITICAL: Verify displays never hear about a change that could still roll back.
        """
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            _send()

        assert sent_messages == []
        assert len(callbacks) == 1

    def test_status_change_is_pushed(self, sent_messages, django_capture_on_commit_callbacks):
        ticket = _send()

        with django_capture_on_commit_callbacks(execute=True):
            KitchenTicketService.mark_ready(ticket.id)

        assert sent_messages[-1][1] == "ticket_status_changed"
        assert sent_messages[-1][2]["status"] == KitchenTicketStatus.READY

    def test_clear_and_shift_are_pushed(self, sent_messages, django_capture_on_commit_callbacks):
        _send(3)

        with django_capture_on_commit_callbacks(execute=True):
            KitchenTicketService.shift_to_table(3, 9)
            KitchenTicketService.clear_for_table(9)

        types = [(group, message_type) for group, message_type, _ in sent_messages]
        assert ("kitchen_table_3", "tickets_shifted") in types
        assert ("kitchen_table_9", "tickets_shifted") in types
        assert ("kitchen_display", "tickets_cleared") in types

    def test_failed_push_does_not_fail_transition(self, monkeypatch, django_capture_on_commit_callbacks, caplog):
        """
        CRITICAL: Verify a broken notification channel never blocks the kitchen.

        Scenario:
        - Notification service raises on every push
        - Ticket is marked READY
        - Expected: status change persisted, error logged
        """
        ticket = _send()

        def broken(*args, **kwargs):
            raise ConnectionError("channel layer down")

        monkeypatch.setattr(notification_service, "on_kitchen_ticket_status_changed", broken)

        with caplog.at_level("ERROR", logger="kds.events.publishers"):
            with django_capture_on_commit_callbacks(execute=True):
                ready = KitchenTicketService.mark_ready(ticket.id)

        assert ready.status == KitchenTicketStatus.READY
        assert KitchenTicket.objects.get(pk=ticket.id).status == KitchenTicketStatus.READY
        assert "channel layer down" in caplog.text

    def test_channel_layer_errors_are_logged(self, monkeypatch, caplog):
        class BrokenLayer:
            async def group_send(self, group, message):
                raise RuntimeError("redis gone")

        monkeypatch.setattr(notification_service, "channel_layer", BrokenLayer())

        with caplog.at_level("ERROR", logger="kds.services.notification_service"):
            notification_service.notify_kitchen("tickets_cleared", {"table_no": 7, "count": 1})

        assert "redis gone" in caplog.text
