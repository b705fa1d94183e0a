from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def write_audit_log(entry):
    """Persist one audit entry. Failures are logged, never raised to the publisher."""
    from .models import AuditLog

    try:
        log = AuditLog.objects.create(**entry)
        logger.debug(f"Audit {log.entity_type} {log.entity_id} {log.action} recorded (id={log.id})")
        return log.id
    except Exception as e:
        logger.error(
            f"Failed to write audit log for {entry.get('entity_type')} "
            f"{entry.get('entity_id')} {entry.get('action')}: {e}"
        )
        return None
