"""Tests for the in-process QueueGateway."""
from __future__ import annotations

import threading

import pytest

from areacheck.gateway.memory import QueueGateway


def test_requests_come_out_in_order():
    gw = QueueGateway()
    gw.submit({"REQUEST_METHOD": "GET", "N": "1"})
    gw.submit({"REQUEST_METHOD": "GET", "N": "2"})
    assert gw.pending == 2
    assert gw.accept().params["N"] == "1"
    assert gw.accept().params["N"] == "2"


def test_respond_resolves_future():
    gw = QueueGateway()
    fut = gw.submit({"REQUEST_METHOD": "POST"}, b"body")
    req = gw.accept()
    assert req.body == b"body"
    gw.respond(req, b"raw-response")
    assert fut.result(timeout=1.0) == b"raw-response"


def test_close_releases_blocked_accept():
    gw = QueueGateway()
    got = []

    t = threading.Thread(target=lambda: got.append(gw.accept()))
    t.start()
    gw.close()
    t.join(timeout=5.0)
    assert got == [None]
    # stays closed for later callers too
    assert gw.accept() is None


def test_queued_requests_are_served_before_close_marker():
    gw = QueueGateway()
    gw.submit({"N": "1"})
    gw.close()
    assert gw.accept().params["N"] == "1"
    assert gw.accept() is None


def test_submit_after_close_fails():
    gw = QueueGateway()
    gw.close()
    with pytest.raises(RuntimeError):
        gw.submit({})


def test_submit_racing_close_never_strands_a_future():
    gw = QueueGateway()
    accepted = []
    lock = threading.Lock()
    go = threading.Event()

    def _producer():
        go.wait()
        for _ in range(200):
            try:
                fut = gw.submit({"REQUEST_METHOD": "GET"})
            except RuntimeError:
                return
            with lock:
                accepted.append(fut)

    producers = [threading.Thread(target=_producer) for _ in range(4)]
    for t in producers:
        t.start()
    go.set()
    gw.close()
    for t in producers:
        t.join(timeout=5.0)

    # whatever submit() accepted sits in front of the close marker
    while True:
        req = gw.accept()
        if req is None:
            break
        gw.respond(req, b"ok")
    assert all(f.done() for f in accepted)
    assert gw.accept() is None
