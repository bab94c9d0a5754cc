"""Tests for StripedSessionStore.

Covers: lazy creation, snapshot semantics, id isolation, the optional
history cap, concurrent appends to one id and to many ids, and invalid
construction.
"""
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, wait

import pytest

from areacheck.session.store import SessionStore, StripedSessionStore


def test_unknown_session_has_empty_history():
    store = StripedSessionStore()
    assert store.get_history("nobody") == ()
    assert store.session_count() == 0


def test_append_creates_session_lazily(make_result):
    store = StripedSessionStore(num_stripes=4)
    first, second = make_result(), make_result()
    store.append("s1", first)
    store.append("s1", second)

    assert store.get_history("s1") == (first, second)
    assert store.session_count() == 1
    assert store.session_ids() == ["s1"]


def test_sessions_are_isolated(make_result):
    store = StripedSessionStore(num_stripes=1)  # same stripe for everyone
    a, b = make_result(), make_result()
    store.append("a", a)
    store.append("b", b)
    assert store.get_history("a") == (a,)
    assert store.get_history("b") == (b,)
    assert sorted(store.session_ids()) == ["a", "b"]


def test_snapshot_does_not_change_after_later_appends(make_result):
    store = StripedSessionStore()
    store.append("s", make_result())
    snapshot = store.get_history("s")
    store.append("s", make_result())
    assert len(snapshot) == 1
    assert len(store.get_history("s")) == 2


def test_append_and_snapshot_includes_new_entry(make_result):
    store = StripedSessionStore()
    first = make_result()
    store.append("s", first)
    second = make_result()
    history = store.append_and_snapshot("s", second)
    assert history == (first, second)


def test_blank_session_id_is_rejected(make_result):
    store = StripedSessionStore()
    with pytest.raises(ValueError):
        store.append("", make_result())
    with pytest.raises(ValueError):
        store.append_and_snapshot("   ", make_result())


def test_max_history_drops_oldest(make_result):
    store = StripedSessionStore(max_history=3)
    results = [make_result(seq=i) for i in range(5)]
    for r in results:
        store.append("s", r)
    assert store.get_history("s") == tuple(results[2:])


def test_unbounded_by_default(make_result):
    store = StripedSessionStore()
    for i in range(2_000):
        store.append("s", make_result(seq=i))
    history = store.get_history("s")
    assert len(history) == 2_000
    assert history[0].x == 0.0
    assert history[-1].x == 1999.0


def test_invalid_construction():
    with pytest.raises(ValueError):
        StripedSessionStore(num_stripes=0)
    with pytest.raises(ValueError):
        StripedSessionStore(num_stripes=12)
    with pytest.raises(ValueError):
        StripedSessionStore(max_history=0)
    StripedSessionStore(num_stripes=1)
    StripedSessionStore(num_stripes=64, max_history=10)


def test_is_a_session_store():
    assert isinstance(StripedSessionStore(), SessionStore)


def test_sequential_appends_keep_order_under_cross_session_load(make_result):
    """Each thread owns one session; its history must come back in call order."""
    store = StripedSessionStore(num_stripes=4)
    n_threads = 16
    n_appends = 500

    def writer(thread_id):
        for i in range(n_appends):
            store.append(f"session-{thread_id}", make_result(seq=i))

    with ThreadPoolExecutor(max_workers=n_threads) as pool:
        futs = [pool.submit(writer, tid) for tid in range(n_threads)]
        wait(futs)
        for f in futs:
            f.result()

    assert store.session_count() == n_threads
    for tid in range(n_threads):
        history = store.get_history(f"session-{tid}")
        assert [r.x for r in history] == [float(i) for i in range(n_appends)]


def test_concurrent_appends_to_one_session_lose_nothing(make_result):
    store = StripedSessionStore()
    n_threads = 8
    n_appends = 1000

    def writer():
        for _ in range(n_appends):
            store.append("shared", make_result())

    threads = [threading.Thread(target=writer) for _ in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30.0)

    history = store.get_history("shared")
    assert len(history) == n_threads * n_appends
    assert len({r.x for r in history}) == n_threads * n_appends


def test_readers_see_consistent_snapshots(make_result):
    """A snapshot's length never shrinks and matches a prefix of the final history."""
    store = StripedSessionStore(num_stripes=2)
    stop = threading.Event()
    errors: list[str] = []

    def writer():
        for i in range(3000):
            store.append("s", make_result(seq=i))
        stop.set()

    def reader():
        last_len = 0
        while not stop.is_set():
            snap = store.get_history("s")
            if len(snap) < last_len:
                errors.append(f"history shrank from {last_len} to {len(snap)}")
            if [r.x for r in snap] != [float(i) for i in range(len(snap))]:
                errors.append("snapshot is not an ordered prefix")
            last_len = len(snap)

    threads = [threading.Thread(target=writer)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30.0)

    assert errors == []
    assert len(store.get_history("s")) == 3000
