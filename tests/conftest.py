"""Fixtures shared by every test package.

raw_response parses the hand-built HTTP framing so tests can assert on
status, headers and the decoded JSON body separately.
"""
from __future__ import annotations

import json
from dataclasses import dataclass

import pytest

from areacheck.config import ServerConfig
from areacheck.gateway.base import GatewayRequest
from areacheck.protocol.adapter import ProtocolAdapter
from areacheck.session.store import StripedSessionStore

ROUTE = "/fcgi-bin/app.jar"


@dataclass
class RawResponse:
    status_line: str
    headers: dict[str, str]
    body: bytes

    @property
    def status(self) -> int:
        return int(self.status_line.split(" ")[1])

    def json(self):
        return json.loads(self.body.decode("utf-8"))


def parse_raw(payload: bytes) -> RawResponse:
    head, sep, body = payload.partition(b"\r\n\r\n")
    assert sep, "response has no blank line after the headers"
    lines = head.decode("ascii").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return RawResponse(status_line=lines[0], headers=headers, body=body)


@pytest.fixture()
def raw_response():
    return parse_raw


@pytest.fixture()
def store() -> StripedSessionStore:
    return StripedSessionStore(num_stripes=4)


@pytest.fixture()
def adapter(store) -> ProtocolAdapter:
    return ProtocolAdapter(ServerConfig(), store)


@pytest.fixture()
def post_json():
    """Build a POST request with a JSON body."""
    def _build(payload: dict, content_type: str = "application/json") -> GatewayRequest:
        body = json.dumps(payload).encode("utf-8")
        return GatewayRequest(
            params={
                "REQUEST_METHOD": "POST",
                "SCRIPT_NAME": ROUTE,
                "CONTENT_TYPE": content_type,
                "CONTENT_LENGTH": str(len(body)),
            },
            body=body,
        )
    return _build


@pytest.fixture()
def get_history_request():
    """Build a GET request with the given raw query string."""
    def _build(query: str) -> GatewayRequest:
        return GatewayRequest(
            params={
                "REQUEST_METHOD": "GET",
                "SCRIPT_NAME": ROUTE,
                "QUERY_STRING": query,
            },
        )
    return _build
