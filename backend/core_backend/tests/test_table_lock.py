"""
Per-table lock tests.

These tests use threading to check that work on one table is serialized
while different tables proceed independently.
"""
import time
from threading import Thread, Barrier

import pytest
from django.db import connection

from core_backend.infrastructure.locks import table_lock
from masters.models import Waiter


def _run_threads(targets):
    threads = [Thread(target=target) for target in targets]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)


@pytest.mark.django_db(transaction=True)
class TestTableLock:

    def test_same_table_is_serialized(self, dining_tables):
        """
        CRITICAL: Verify two callers locking the same table never overlap.

        Scenario:
        - 2 threads lock table 7 at the same moment
        - Each records enter/exit around a short sleep
        - Expected: events strictly alternate enter, exit, enter, exit
        """
        events = []
        barrier = Barrier(2)

        def worker(name):
            def run():
                try:
                    barrier.wait()
                    with table_lock(7):
                        events.append(("enter", name))
                        time.sleep(0.05)
                        events.append(("exit", name))
                finally:
                    connection.close()
            return run

        _run_threads([worker("a"), worker("b")])

        assert len(events) == 4
        assert [kind for kind, _ in events] == ["enter", "exit", "enter", "exit"]
        assert events[0][1] == events[1][1]

    def test_lock_is_reentrant(self, dining_tables):
        with table_lock(3):
            with table_lock(3, 9) as locked:
                assert locked == [3, 9]

    def test_tables_are_locked_in_ascending_order(self, dining_tables):
        with table_lock(9, 3, 9) as locked:
            assert locked == [3, 9]

    def test_none_table_numbers_are_ignored(self):
        with table_lock(None, 4) as locked:
            assert locked == [4]

    def test_exception_rolls_back_writes(self, dining_tables):
        """
        CRITICAL: Verify a failure inside the lock leaves nothing behind.
        """
        with pytest.raises(RuntimeError):
            with table_lock(2):
                Waiter.objects.create(name="Temp")
                raise RuntimeError("abort")

        assert not Waiter.objects.filter(name="Temp").exists()
