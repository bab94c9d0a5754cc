"""Gateway abstraction: where requests come from and responses go.

A gateway hands out one request at a time as CGI-style params plus the
raw body, and takes exactly one raw response per request. Framing on
the far side (FastCGI, plain CGI, a test queue, a TCP socket) is the
gateway's business; the request loop only sees this interface.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class GatewayRequest:
    """One request as delivered by a gateway."""
    params: Mapping[str, str]
    body: bytes = b""
    # opaque per-request handle a gateway uses to route the response
    token: object = field(default=None, compare=False)

    @property
    def method(self) -> str | None:
        return self.params.get("REQUEST_METHOD")

    @property
    def content_type(self) -> str | None:
        return self.params.get("CONTENT_TYPE")

    @property
    def script_name(self) -> str | None:
        return self.params.get("SCRIPT_NAME")

    @property
    def query_string(self) -> str:
        return self.params.get("QUERY_STRING") or ""

    @property
    def content_length(self) -> int | None:
        """Declared body length, or None if absent or not a valid integer."""
        raw = self.params.get("CONTENT_LENGTH")
        if raw is None:
            return None
        try:
            length = int(raw.strip())
        except ValueError:
            return None
        return length if length >= 0 else None


class Gateway(ABC):
    """Transport-side interface used by RequestLoop."""

    @abstractmethod
    def accept(self) -> GatewayRequest | None:
        """Block until the next request arrives. None means no more requests."""
        ...

    @abstractmethod
    def respond(self, request: GatewayRequest, payload: bytes) -> None:
        """Deliver the raw response for request."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Stop handing out requests. A blocked accept() returns None."""
        ...
