"""Tests for the ReadWriteLock guarding session stripes."""
from __future__ import annotations

import threading
import time

from areacheck.concurrency.rwlock import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5.0)

    def reader():
        with lock.read():
            inside.wait()  # all three must be inside at once

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5.0)
    assert not any(t.is_alive() for t in threads)


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    events: list[str] = []

    lock.acquire_write()

    def reader():
        with lock.read():
            events.append("read")

    t = threading.Thread(target=reader)
    t.start()
    time.sleep(0.05)
    events.append("write-done")
    lock.release_write()
    t.join(timeout=5.0)

    assert events == ["write-done", "read"]


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    order: list[str] = []
    lock.acquire_read()

    def writer():
        with lock.write():
            order.append("write")

    def late_reader():
        with lock.read():
            order.append("late-read")

    w = threading.Thread(target=writer)
    w.start()
    time.sleep(0.05)  # writer is now pending
    r = threading.Thread(target=late_reader)
    r.start()
    time.sleep(0.05)
    lock.release_read()
    w.join(timeout=5.0)
    r.join(timeout=5.0)

    assert order == ["write", "late-read"]


def test_counter_is_consistent_under_write_lock():
    lock = ReadWriteLock()
    counter = {"n": 0}

    def bump():
        for _ in range(2000):
            with lock.write():
                counter["n"] += 1

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10.0)
    assert counter["n"] == 16000
