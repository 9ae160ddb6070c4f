from __future__ import annotations

import threading

from src.attendance_gate.attendance_gate.submissions.service import _KeyedLocks


def test_entry_kept_while_another_caller_waits():
    locks = _KeyedLocks()
    key = ("dev-1", "global")
    entered = threading.Event()
    release = threading.Event()
    second_done = threading.Event()

    def first():
        with locks.hold(key):
            entered.set()
            release.wait(5)

    def second():
        with locks.hold(key):
            pass
        second_done.set()

    t1 = threading.Thread(target=first)
    t1.start()
    entered.wait(5)
    t2 = threading.Thread(target=second)
    t2.start()

    assert len(locks) == 1
    assert not second_done.is_set()

    release.set()
    t1.join(5)
    t2.join(5)

    assert second_done.is_set()
    assert len(locks) == 0


def test_distinct_keys_do_not_accumulate():
    locks = _KeyedLocks()
    for i in range(1000):
        with locks.hold((f"dev-{i}", "global")):
            pass
    assert len(locks) == 0
