"""
Per-table mutual exclusion.

Every mutation of a table's provisional lines, bill or kitchen tickets runs
inside ``table_lock``. Locks are keyed by table number so different tables
never wait on each other.
"""
import logging
import threading
from contextlib import contextmanager

from django.apps import apps
from django.db import transaction

logger = logging.getLogger(__name__)

_registry_guard = threading.Lock()
_table_locks = {}


def _lock_for(table_no):
    with _registry_guard:
        lock = _table_locks.get(table_no)
        if lock is None:
            lock = threading.RLock()
            _table_locks[table_no] = lock
        return lock


@contextmanager
def table_lock(*table_nos):
    """
    Serialize work on the given tables.

    Takes an in-process lock per table (ascending order, so two callers
    locking the same pair can't deadlock), then opens a transaction and
    row-locks the matching ``DiningTable`` rows for databases that support
    ``SELECT ... FOR UPDATE``. The transaction is the unit of atomicity:
    an exception inside the block rolls back every write.

    Usage:
        with table_lock(3, 9):
            ...
    """
    ordered = sorted({int(table_no) for table_no in table_nos if table_no is not None})
    locks = [_lock_for(table_no) for table_no in ordered]

    for lock in locks:
        lock.acquire()
    try:
        with transaction.atomic():
            DiningTable = apps.get_model("masters", "DiningTable")
            list(DiningTable.objects.select_for_update().filter(pk__in=ordered))
            logger.debug(f"Acquired table lock for {ordered}")
            yield ordered
    finally:
        for lock in reversed(locks):
            lock.release()
