"""Request decoding: query strings, JSON and form bodies, numbers, session ids.

Two body encodings reach the same endpoint:

    application/json                   {"X": "1", "Y": "0.5", "R": "2", "sessionId": "..."}
    application/x-www-form-urlencoded  xVal=1&yVal=0.5&rVal=2&sessionId=...

Both are reduced to PointFields (raw strings) before any numeric parsing,
so the adapter runs one code path from there on.

Every decoding problem raises RequestError carrying the message that is
sent back to the client. Nothing here touches shared state.
"""
from __future__ import annotations

import json
import re
import time
import uuid
from dataclasses import dataclass
from urllib.parse import parse_qsl

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

MISSING_PARAMETERS = "Missing required parameters"
MISSING_SESSION_ID = "Missing required parameter: sessionId"
INVALID_NUMBER = "Invalid number format"
INVALID_DATA = "Invalid data, try again :)"
MALFORMED_BODY = "Malformed request body"
CONTENT_TYPE_MISSING = "Content-Type is missing"
CONTENT_TYPE_UNSUPPORTED = "Content-Type is not supported"

SESSION_ID_PARAM = "sessionId"

# key lookups in order of preference
_JSON_KEYS = {"x": ("X", "x"), "y": ("Y", "y"), "r": ("R", "r")}
_FORM_KEYS = {"x": ("xVal",), "y": ("yVal",), "r": ("rVal",)}

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class RequestError(ValueError):
    """A request that cannot be served. str(exc) is the client-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True, slots=True)
class PointFields:
    """Raw, not yet parsed field values from a POST body."""
    x: str
    y: str
    r: str
    session_id: str | None = None


def media_type(content_type: str | None) -> str | None:
    """'application/json; charset=UTF-8' -> 'application/json'."""
    if content_type is None:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def parse_query(query: str) -> dict[str, str]:
    """URL-decode key=value&... pairs. The first occurrence of a key wins."""
    params: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


def normalize_decimal(text: str) -> str:
    """Accept ',' as the decimal separator: ' 1,5 ' -> '1.5'."""
    return text.strip().replace(",", ".")


def parse_number(text: str) -> float:
    """Parse a plain decimal number after normalization.

    Only digits, one optional point, an optional sign and an optional
    exponent are accepted. 'NaN', 'inf', '1_000' and empty strings are
    rejected even though float() would take some of them.
    """
    normalized = normalize_decimal(text)
    if not _DECIMAL_RE.fullmatch(normalized):
        raise RequestError(INVALID_NUMBER)
    return float(normalized)


def resolve_session_id(raw: str | None) -> str | None:
    """Trim a client-supplied id. Blank means 'no id'."""
    if raw is None:
        return None
    trimmed = raw.strip()
    return trimmed or None


def mint_session_id() -> str:
    """New session id: hex nanosecond clock plus a random suffix.

    Unique in practice within one process; not meant to be unguessable.
    """
    return f"{time.time_ns():x}-{uuid.uuid4().hex[:8]}"


def decode_point_fields(content_type: str | None, body: bytes) -> PointFields:
    """Pick the decoder from the declared content type and extract the fields."""
    kind = media_type(content_type)
    if kind is None or kind == "":
        raise RequestError(CONTENT_TYPE_MISSING)
    if kind == JSON_CONTENT_TYPE:
        return _decode_json(body)
    if kind == FORM_CONTENT_TYPE:
        return _decode_form(body)
    raise RequestError(CONTENT_TYPE_UNSUPPORTED)


def _decode_text(body: bytes) -> str:
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        raise RequestError(MALFORMED_BODY) from None


def _decode_json(body: bytes) -> PointFields:
    text = _decode_text(body)
    try:
        obj = json.loads(text)
    # ValueError covers JSONDecodeError and over-long integer literals,
    # RecursionError covers pathologically nested arrays/objects
    except (ValueError, RecursionError):
        raise RequestError(MALFORMED_BODY) from None
    if not isinstance(obj, dict):
        raise RequestError(MALFORMED_BODY)

    values = {}
    for name, keys in _JSON_KEYS.items():
        value = next((obj[k] for k in keys if obj.get(k) is not None), None)
        if value is None:
            raise RequestError(MISSING_PARAMETERS)
        values[name] = _json_scalar_text(value)

    session = obj.get(SESSION_ID_PARAM)
    if isinstance(session, bool) or not isinstance(session, (str, int)):
        session = None
    return PointFields(
        x=values["x"],
        y=values["y"],
        r=values["r"],
        session_id=resolve_session_id(None if session is None else str(session)),
    )


def _json_scalar_text(value: object) -> str:
    """JSON clients send numbers either as strings or as JSON numbers."""
    # bool is an int subclass; true/false are not coordinates
    if isinstance(value, bool):
        raise RequestError(INVALID_NUMBER)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return repr(value)
    raise RequestError(INVALID_NUMBER)


def _decode_form(body: bytes) -> PointFields:
    params = parse_query(_decode_text(body))
    values = {}
    for name, keys in _FORM_KEYS.items():
        value = next((params[k] for k in keys if k in params), None)
        if value is None:
            raise RequestError(MISSING_PARAMETERS)
        values[name] = value
    return PointFields(
        x=values["x"],
        y=values["y"],
        r=values["r"],
        session_id=resolve_session_id(params.get(SESSION_ID_PARAM)),
    )
