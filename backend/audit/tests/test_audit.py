"""
Audit sink: entries are written after commit and a failing sink never
fails the operation being audited.
"""
from datetime import date
from decimal import Decimal

import pytest

from audit.models import AuditLog
from audit.services import AuditService
from audit.tasks import write_audit_log


@pytest.mark.django_db
class TestAuditService:

    def test_record_is_written_after_commit(self, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            AuditService.record("Bill", 12, AuditLog.Action.PAID, details="Paid by CASH", actor=4)

        assert len(callbacks) == 1
        assert not AuditLog.objects.exists()

        callbacks[0]()

        log = AuditLog.objects.get()
        assert (log.entity_type, log.entity_id, log.action) == ("Bill", "12", "PAID")
        assert log.performed_by == "4"
        assert log.details == "Paid by CASH"

    def test_values_are_made_json_safe(self, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            AuditService.record(
                "Bill",
                12,
                AuditLog.Action.OVERRIDE,
                old_values={"net_amount": Decimal("100.00"), "lines": [{"rate": Decimal("20")}]},
                new_values={"bill_date": date(2024, 1, 31)},
            )

        log = AuditLog.objects.get()
        assert log.old_values == {"net_amount": "100.00", "lines": [{"rate": "20"}]}
        assert log.new_values == {"bill_date": "2024-01-31"}

    def test_dispatch_failure_is_logged_not_raised(self, monkeypatch, caplog, django_capture_on_commit_callbacks):
        """
        CRITICAL: Verify a broken audit pipeline never fails the audited operation.
        """
        def broken(entry):
            raise ConnectionError("broker unreachable")

        monkeypatch.setattr(write_audit_log, "delay", broken)

        with caplog.at_level("ERROR", logger="audit.services"):
            with django_capture_on_commit_callbacks(execute=True):
                AuditService.record("Table", 3, AuditLog.Action.SHIFT)

        assert "broker unreachable" in caplog.text
        assert not AuditLog.objects.exists()


@pytest.mark.django_db
class TestWriteAuditLogTask:

    def test_task_persists_entry(self):
        log_id = write_audit_log({
            "entity_type": "Bill",
            "entity_id": "7",
            "action": AuditLog.Action.CREATE,
            "details": "",
            "old_values": None,
            "new_values": {"bill_amount": "100.00"},
            "performed_by": "",
        })

        assert AuditLog.objects.get(pk=log_id).new_values == {"bill_amount": "100.00"}

    def test_task_swallows_bad_entries(self, caplog):
        with caplog.at_level("ERROR", logger="audit.tasks"):
            assert write_audit_log({"entity_type": "Bill", "no_such_field": 1}) is None

        assert "Failed to write audit log" in caplog.text
