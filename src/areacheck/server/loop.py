"""RequestLoop: accept -> handle -> respond, forever.

Architecture:
    One thread runs run(). It blocks in gateway.accept(), hands the
    request to the ProtocolAdapter, writes the raw response back through
    the gateway and goes around again.

Requests are served strictly one after another, so writes to the
gateway never interleave. The loop only ends when the gateway reports
no more requests (accept() returns None); stop() closes the gateway to
get there. A failing request, or a failed write, is logged and never
takes the loop down.

There are no timeouts here. A gateway that blocks while reading a body
blocks the loop with it.
"""
from __future__ import annotations

import logging
import threading

from areacheck.gateway.base import Gateway, GatewayRequest
from areacheck.protocol.adapter import ProtocolAdapter
from areacheck.protocol.response import error_response

log = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


class RequestLoop:
    """Blocking request loop over a gateway.

    Args:
        gateway: where requests come from and responses go
        adapter: turns each request into a raw response
    """

    def __init__(self, gateway: Gateway, adapter: ProtocolAdapter) -> None:
        self._gateway = gateway
        self._adapter = adapter
        self._ready = threading.Event()  # set once run() is about to accept
        self._requests_processed = 0
        self._lock = threading.Lock()

    def run(self) -> None:
        """Serve requests until the gateway reports there are no more.

        The gateway is the only stop signal: after stop() the loop keeps
        answering whatever the gateway still hands out (a QueueGateway
        drains its backlog) and exits once accept() returns None.
        """
        log.info("Request loop started")
        self._ready.set()
        while True:
            request = self._gateway.accept()
            if request is None:
                break
            self._serve(request)
        log.info("Request loop stopped after %d requests", self.requests_processed)

    def stop(self) -> None:
        """Ask the loop to finish by closing the gateway. Safe to call more than once."""
        self._gateway.close()

    def wait_ready(self, timeout: float = 5.0) -> bool:
        """Block until run() has started. For test setup."""
        return self._ready.wait(timeout=timeout)

    def _serve(self, request: GatewayRequest) -> None:
        try:
            payload = self._adapter.handle(request)
        except Exception:
            log.exception("Unhandled error while serving %s request", request.method)
            payload = error_response(INTERNAL_ERROR)

        try:
            self._gateway.respond(request, payload)
        except Exception:
            log.exception("Failed to write response for %s request", request.method)
        finally:
            with self._lock:
                self._requests_processed += 1

    @property
    def requests_processed(self) -> int:
        """Total requests answered (thread-safe read)."""
        with self._lock:
            return self._requests_processed
