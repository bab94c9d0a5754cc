"""In-process gateway backed by a queue.

Producers call submit() from any thread and get a Future that resolves
to the raw response bytes. The request loop drains the queue in order.
Used by the tests and for embedding the server in another program.
"""
from __future__ import annotations

import queue
import threading
from collections.abc import Mapping
from concurrent.futures import Future

from areacheck.gateway.base import Gateway, GatewayRequest

_CLOSED = object()


class QueueGateway(Gateway):
    """Thread-safe in-memory gateway."""

    def __init__(self) -> None:
        self._queue: queue.Queue = queue.Queue()
        self._closed = False
        # orders submit() against close(): nothing lands behind the marker
        self._lock = threading.Lock()

    def submit(self, params: Mapping[str, str], body: bytes = b"") -> Future:
        """Enqueue a request. The returned Future yields the raw response."""
        fut: Future = Future()
        request = GatewayRequest(params=dict(params), body=body, token=fut)
        with self._lock:
            if self._closed:
                raise RuntimeError("Gateway is closed")
            self._queue.put(request)
        return fut

    def accept(self) -> GatewayRequest | None:
        item = self._queue.get()
        if item is _CLOSED:
            # leave the marker for any other consumer blocked on accept()
            self._queue.put(_CLOSED)
            return None
        return item

    def respond(self, request: GatewayRequest, payload: bytes) -> None:
        fut = request.token
        if isinstance(fut, Future) and not fut.done():
            fut.set_result(payload)

    def close(self) -> None:
        """Stop after the requests already queued have been served."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)

    @property
    def pending(self) -> int:
        """Requests waiting to be accepted (approximate)."""
        return self._queue.qsize()
