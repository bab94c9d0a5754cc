"""Hand-built response framing.

Every response is a complete raw HTTP message:

    HTTP/1.1 200 OK\\r\\n
    Content-Type: application/json; charset=UTF-8\\r\\n
    Content-Length: <UTF-8 byte length of body>\\r\\n
    [CORS headers, success only]\\r\\n
    \\r\\n
    <body>

Content-Length counts encoded bytes, not characters, so multi-byte
text in the body (session ids, error messages) keeps the framing exact.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from areacheck.domain.coordinates import EvaluationResult

log = logging.getLogger(__name__)

STATUS_OK = "200 OK"
STATUS_BAD_REQUEST = "400 Bad Request"
CONTENT_TYPE = "application/json; charset=UTF-8"
SESSION_HEADER = "X-Session-Id"

CORS_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, POST, OPTIONS"),
    ("Access-Control-Allow-Headers", "Content-Type"),
)

EMPTY_RESULTS_BODY = '{"results":[]}'


def dump_json(obj: Any) -> str:
    """Compact JSON, non-ASCII kept as-is. NaN/Infinity raise ValueError."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def encode_response(
    status: str,
    body: str,
    headers: Iterable[tuple[str, str]] = (),
) -> bytes:
    """Frame body as a raw HTTP/1.1 response."""
    payload = body.encode("utf-8")
    lines = [
        f"HTTP/1.1 {status}",
        f"Content-Type: {CONTENT_TYPE}",
        f"Content-Length: {len(payload)}",
    ]
    lines.extend(f"{name}: {value}" for name, value in headers)
    head = "\r\n".join(lines) + "\r\n\r\n"
    return head.encode("ascii") + payload


def success_response(
    results: Iterable[EvaluationResult],
    session_id: str | None = None,
) -> bytes:
    """200 response with {"results": [...]} and CORS headers.

    If the results cannot be serialized the body degrades to an empty
    result list so the client still gets a well-formed message.
    """
    try:
        body = dump_json({"results": [r.to_dict() for r in results]})
    except (TypeError, ValueError) as exc:
        log.warning("Error serializing results to JSON: %s", exc)
        body = EMPTY_RESULTS_BODY

    headers = list(CORS_HEADERS)
    if session_id is not None:
        # header values must stay single-line ASCII
        safe_id = session_id.encode("ascii", "ignore").decode("ascii")
        safe_id = safe_id.replace("\r", "").replace("\n", "")
        if safe_id:
            headers.append((SESSION_HEADER, safe_id))
    return encode_response(STATUS_OK, body, headers)


def error_response(message: str) -> bytes:
    """400 response with {"error": message}; empty body if that cannot be built."""
    try:
        body = dump_json({"error": message})
    except (TypeError, ValueError) as exc:
        log.warning("Error serializing error response to JSON: %s", exc)
        body = ""
    return encode_response(STATUS_BAD_REQUEST, body)
