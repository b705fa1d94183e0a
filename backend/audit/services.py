"""
Fire-and-forget audit sink.

Callers record a transition and move on: the entry is handed to a celery task
once the surrounding transaction commits, and any failure along the way is
logged and dropped so the business operation is never affected.
"""
from decimal import Decimal
import logging

from django.db import transaction

logger = logging.getLogger(__name__)


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


class AuditService:

    @staticmethod
    def _dispatch(entry):
        from .tasks import write_audit_log

        try:
            write_audit_log.delay(entry)
        except Exception as e:
            logger.error(
                f"Failed to queue audit log for {entry['entity_type']} "
                f"{entry['entity_id']} {entry['action']}: {e}"
            )

    @staticmethod
    def record(entity_type, entity_id, action, details="", actor=None, old_values=None, new_values=None):
        """
        Record a state transition.

        Args:
            entity_type: e.g. "Bill", "Table"
            entity_id: identifier of the entity
            action: an ``AuditLog.Action`` value
            details: free-text description
            actor: user id or name performing the action
            old_values / new_values: snapshots, made JSON-safe here
        """
        try:
            entry = {
                "entity_type": str(entity_type),
                "entity_id": str(entity_id),
                "action": str(action),
                "details": details or "",
                "old_values": _jsonable(old_values),
                "new_values": _jsonable(new_values),
                "performed_by": "" if actor is None else str(actor),
            }

            if transaction.get_connection().in_atomic_block:
                transaction.on_commit(lambda: AuditService._dispatch(entry))
            else:
                AuditService._dispatch(entry)
        except Exception as e:
            logger.error(f"Error recording audit for {entity_type} {entity_id} {action}: {e}")
