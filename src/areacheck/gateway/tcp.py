"""TCP gateway: a minimal stand-in for a FastCGI front end.

Wire format, one request per connection:

    request:   <len><params JSON>  <len><body bytes>
    response:  <len><raw response bytes>

where <len> is a 4-byte big-endian uint32 and no frame may exceed
MAX_MESSAGE_SIZE. A response that would (a very long session history) is
replaced by a 400 "Response too large" error. The params message is a JSON
object of CGI variables (REQUEST_METHOD, CONTENT_TYPE, SCRIPT_NAME,
QUERY_STRING, ...). After the response is sent the connection is closed.

Connections are accepted one at a time and the next one is not taken
until respond() has been called for the current one, so responses can
never interleave.
"""
from __future__ import annotations

import json
import logging
import socket
import struct
from collections.abc import Mapping

from areacheck.gateway.base import Gateway, GatewayRequest
from areacheck.protocol.response import error_response

log = logging.getLogger(__name__)

_LENGTH = struct.Struct("!I")   # 4-byte big-endian frame length
MAX_MESSAGE_SIZE = 1024 * 1024  # 1 MB, applies to every frame in both directions
ACCEPT_POLL_SECONDS = 0.5
RESPONSE_TOO_LARGE = "Response too large"


def _fill(sock: socket.socket, buf: memoryview) -> None:
    """Fill buf from the socket, or raise ConnectionError if the peer hangs up."""
    got = 0
    while got < len(buf):
        n = sock.recv_into(buf[got:])
        if n == 0:
            raise ConnectionError(
                f"Socket closed with {len(buf) - got} bytes still expected"
            )
        got += n


def read_frame(sock: socket.socket, limit: int = MAX_MESSAGE_SIZE) -> bytes:
    """Read one length-prefixed frame.

    The length is checked before any payload byte is read, so an
    oversized frame costs the reader four bytes of buffer.

    Raises:
        ConnectionError: if the socket closes mid-frame
        ValueError: if the declared length exceeds limit
    """
    header = bytearray(_LENGTH.size)
    _fill(sock, memoryview(header))
    (length,) = _LENGTH.unpack(header)
    if length > limit:
        raise ValueError(f"Frame of {length} bytes exceeds limit {limit}")
    payload = bytearray(length)
    _fill(sock, memoryview(payload))
    return bytes(payload)


def write_frame(sock: socket.socket, payload: bytes) -> None:
    """Write one length-prefixed frame. Size policy belongs to the caller."""
    sock.sendall(_LENGTH.pack(len(payload)) + payload)


def encode_params(params: Mapping[str, str]) -> bytes:
    return json.dumps(dict(params), separators=(",", ":")).encode("utf-8")


def decode_params(data: bytes) -> dict[str, str]:
    """Parse the params message. Raises ValueError if it is not a JSON object."""
    try:
        obj = json.loads(data.decode("utf-8"))
    except RecursionError:
        raise ValueError("params message is nested too deeply") from None
    if not isinstance(obj, dict):
        raise ValueError("params message must be a JSON object")
    return {str(k): str(v) for k, v in obj.items() if v is not None}


class TcpGateway(Gateway):
    """Listens on host:port and yields one request per connection.

    Args:
        host: Bind address (default "127.0.0.1")
        port: Bind port (default 0 = OS picks a free port)
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 0) -> None:
        self._host = host
        self._port = port
        self._server_socket: socket.socket | None = None
        self._running = False

    @property
    def address(self) -> tuple[str, int]:
        """Return (host, port) the gateway is bound to. Only valid after start()."""
        if self._server_socket is None:
            raise RuntimeError("Gateway not started")
        return self._server_socket.getsockname()[:2]

    def start(self) -> None:
        """Bind and listen. Returns immediately; accept() does the waiting."""
        self._server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server_socket.bind((self._host, self._port))
        self._server_socket.listen(128)
        self._server_socket.settimeout(ACCEPT_POLL_SECONDS)
        self._running = True
        log.info("TCP gateway listening on %s:%d", *self.address)

    def accept(self) -> GatewayRequest | None:
        """Wait for the next well-formed request.

        Polls with a short socket timeout so close() from another thread
        is noticed. Connections that break the framing are logged, closed
        and skipped.
        """
        while self._running:
            server = self._server_socket
            if server is None:
                break
            try:
                client_sock, addr = server.accept()
            except socket.timeout:
                continue
            except OSError:
                break  # socket closed by close()

            client_sock.settimeout(None)
            try:
                params = decode_params(read_frame(client_sock))
                body = read_frame(client_sock)
            except ConnectionError:
                log.debug("Client %s disconnected before sending a request", addr)
                client_sock.close()
                continue
            except ValueError as exc:
                log.warning("Dropping malformed frame from %s: %s", addr, exc)
                client_sock.close()
                continue
            return GatewayRequest(params=params, body=body, token=client_sock)
        return None

    def respond(self, request: GatewayRequest, payload: bytes) -> None:
        client_sock = request.token
        if not isinstance(client_sock, socket.socket):
            raise TypeError("request did not come from this gateway")
        if len(payload) > MAX_MESSAGE_SIZE:
            # clients reject frames over the limit
            log.warning(
                "Response of %d bytes exceeds frame limit %d, sending error instead",
                len(payload), MAX_MESSAGE_SIZE,
            )
            payload = error_response(RESPONSE_TOO_LARGE)
        try:
            write_frame(client_sock, payload)
        finally:
            client_sock.close()

    def close(self) -> None:
        self._running = False
        if self._server_socket is not None:
            try:
                self._server_socket.close()
            except OSError:
                pass
            self._server_socket = None


def send_request(
    host: str,
    port: int,
    params: Mapping[str, str],
    body: bytes = b"",
    timeout: float = 5.0,
) -> bytes:
    """Client side: send one request to a TcpGateway and return the raw response."""
    sock = socket.create_connection((host, port), timeout=timeout)
    try:
        write_frame(sock, encode_params(params))
        write_frame(sock, body)
        return read_frame(sock)
    finally:
        sock.close()
