"""Single-request gateway for classic (non-parsed-header) CGI.

The web server starts one process per request, passes the params in the
environment and the body on stdin, and relays whatever the process
writes to stdout. The response already carries its own status line and
headers, so the server must be configured for nph-style output.
"""
from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from typing import BinaryIO

from areacheck.gateway.base import Gateway, GatewayRequest

log = logging.getLogger(__name__)


class StdioGateway(Gateway):
    """Serves exactly one request from environ + stdin, then reports no more.

    Args:
        environ: request params (default os.environ)
        stdin: binary stream holding the body (default sys.stdin.buffer)
        stdout: binary stream for the response (default sys.stdout.buffer)
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
    ) -> None:
        self._environ = dict(os.environ if environ is None else environ)
        self._stdin = stdin if stdin is not None else sys.stdin.buffer
        self._stdout = stdout if stdout is not None else sys.stdout.buffer
        self._served = False

    def accept(self) -> GatewayRequest | None:
        if self._served:
            return None
        self._served = True
        headers_only = GatewayRequest(params=self._environ)
        return GatewayRequest(params=self._environ, body=self._read_body(headers_only))

    def respond(self, request: GatewayRequest, payload: bytes) -> None:
        self._stdout.write(payload)
        self._stdout.flush()

    def close(self) -> None:
        self._served = True

    def _read_body(self, request: GatewayRequest) -> bytes:
        """Read exactly CONTENT_LENGTH bytes; a missing or bad length reads nothing.

        Blocks until the declared length has arrived or stdin hits EOF.
        """
        length = request.content_length
        declared = request.params.get("CONTENT_LENGTH")
        if length is None and declared:
            log.warning("Ignoring invalid CONTENT_LENGTH %r", declared)
        if not length:
            return b""
        chunks: list[bytes] = []
        remaining = length
        while remaining > 0:
            chunk = self._stdin.read(remaining)
            if not chunk:
                log.warning("stdin closed with %d body bytes still expected", remaining)
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)
