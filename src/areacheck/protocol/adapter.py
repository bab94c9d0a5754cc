"""ProtocolAdapter: one raw gateway request in, one raw response out.

Per-request flow:
    1. Dispatch on REQUEST_METHOD (GET / POST, anything else is rejected)
    2. Check SCRIPT_NAME against the configured route
    3. GET:  sessionId from the query string -> history snapshot
    4. POST: decode body -> parse numbers -> validate -> evaluate
             -> append to the session -> full history snapshot
    5. Frame the response

The adapter keeps no state of its own between requests; everything that
outlives a request lives in the injected SessionStore. Decoding and
validation failures surface as RequestError and become 400 responses.
No failure path mutates the store.

Thread safety: safe to share across threads as long as the store is.
"""
from __future__ import annotations

import logging
import time

from areacheck.config import ServerConfig
from areacheck.domain.coordinates import CoordinateTriple, EvaluationResult
from areacheck.domain.region import is_in_region
from areacheck.domain.validator import CoordinatesValidator
from areacheck.gateway.base import GatewayRequest
from areacheck.protocol.codec import (
    INVALID_DATA,
    MISSING_SESSION_ID,
    SESSION_ID_PARAM,
    RequestError,
    decode_point_fields,
    mint_session_id,
    parse_number,
    parse_query,
    resolve_session_id,
)
from areacheck.protocol.response import error_response, success_response
from areacheck.session.store import SessionStore, StripedSessionStore

log = logging.getLogger(__name__)

NOT_FOUND = "Not Found"


class ProtocolAdapter:
    """Decodes, evaluates and encodes a single request.

    Args:
        config: route and input grid (default ServerConfig())
        store: session table (default: a fresh StripedSessionStore sized
            from config)
        validator: overrides the validator built from config
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        store: SessionStore | None = None,
        validator: CoordinatesValidator | None = None,
    ) -> None:
        self._config = config or ServerConfig()
        self._store = store or StripedSessionStore(
            num_stripes=self._config.num_stripes,
            max_history=self._config.max_history,
        )
        self._validator = validator or self._config.build_validator()

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def config(self) -> ServerConfig:
        return self._config

    def handle(self, request: GatewayRequest) -> bytes:
        method = request.method
        if method not in ("GET", "POST"):
            log.warning("Unsupported HTTP method: %s", method)
            return error_response(f"Unsupported HTTP method: {method}")

        if request.script_name != self._config.script_name:
            log.warning("Invalid SCRIPT_NAME: %s", request.script_name)
            return error_response(NOT_FOUND)

        try:
            if method == "GET":
                return self._handle_get(request)
            return self._handle_post(request)
        except RequestError as exc:
            log.warning("Rejected %s request: %s", method, exc.message)
            return error_response(exc.message)

    def _handle_get(self, request: GatewayRequest) -> bytes:
        params = parse_query(request.query_string)
        session_id = resolve_session_id(params.get(SESSION_ID_PARAM))
        if session_id is None:
            raise RequestError(MISSING_SESSION_ID)

        history = self._store.get_history(session_id)
        log.debug("History for session %s: %d entries", session_id, len(history))
        return success_response(history)

    def _handle_post(self, request: GatewayRequest) -> bytes:
        fields = decode_point_fields(request.content_type, request.body)

        start_ns = time.perf_counter_ns()
        point = CoordinateTriple(
            x=parse_number(fields.x),
            y=parse_number(fields.y),
            r=parse_number(fields.r),
        )
        if not self._validator.validate(point.x, point.y, point.r):
            raise RequestError(INVALID_DATA)

        inside = is_in_region(point.x, point.y, point.r)
        elapsed_us = (time.perf_counter_ns() - start_ns) / 1_000

        result = EvaluationResult.create(point, inside, elapsed_us)
        session_id = fields.session_id or mint_session_id()
        history = self._store.append_and_snapshot(session_id, result)

        log.info(
            "Processed request: x=%s, y=%s, r=%s, result=%s, time=%.3fms, session=%s",
            point.x, point.y, point.r, inside, result.execution_time_ms, session_id,
        )
        return success_response(history, session_id=session_id)
