"""Tests for the hand-built response framing."""
from __future__ import annotations

import json

from areacheck.domain.coordinates import EvaluationResult
from areacheck.protocol.response import (
    CORS_HEADERS,
    EMPTY_RESULTS_BODY,
    encode_response,
    error_response,
    success_response,
)


def _result(x: float = 1.0, executed_us: float = 10.0) -> EvaluationResult:
    return EvaluationResult(
        x=x, y=0.5, r=2.0, in_region=True,
        timestamp="2024-01-01 12:00:00", evaluation_micros=executed_us,
    )


def test_encode_response_exact_bytes():
    raw = encode_response("200 OK", '{"a":1}', [("X-Test", "yes")])
    assert raw == (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: application/json; charset=UTF-8\r\n"
        b"Content-Length: 7\r\n"
        b"X-Test: yes\r\n"
        b"\r\n"
        b'{"a":1}'
    )


def test_content_length_counts_utf8_bytes(raw_response):
    body = '{"error":"Ошибка ✓"}'
    resp = raw_response(encode_response("400 Bad Request", body))
    assert int(resp.headers["Content-Length"]) == len(body.encode("utf-8"))
    assert int(resp.headers["Content-Length"]) > len(body)
    assert resp.body.decode("utf-8") == body


def test_success_response_has_cors_and_results(raw_response):
    resp = raw_response(success_response([_result(1.0), _result(2.0)]))
    assert resp.status_line == "HTTP/1.1 200 OK"
    for name, value in CORS_HEADERS:
        assert resp.headers[name] == value
    assert int(resp.headers["Content-Length"]) == len(resp.body)
    results = resp.json()["results"]
    assert [r["x"] for r in results] == [1.0, 2.0]
    assert results[0]["inArea"] is True
    assert results[0]["executionTime"] == 0.01


def test_success_response_session_header(raw_response):
    resp = raw_response(success_response([], session_id="abc-123"))
    assert resp.headers["X-Session-Id"] == "abc-123"
    assert resp.json() == {"results": []}


def test_session_header_cannot_inject_lines(raw_response):
    resp = raw_response(success_response([], session_id="a\r\nSet-Cookie: x"))
    assert resp.headers["X-Session-Id"] == "aSet-Cookie: x"
    assert "Set-Cookie" not in resp.headers


def test_success_response_falls_back_on_unserializable(raw_response):
    bad = _result(x=float("nan"))
    resp = raw_response(success_response([bad]))
    assert resp.status == 200
    assert resp.body.decode("utf-8") == EMPTY_RESULTS_BODY
    assert int(resp.headers["Content-Length"]) == len(EMPTY_RESULTS_BODY)


def test_error_response_format(raw_response):
    resp = raw_response(error_response("Missing required parameters"))
    assert resp.status_line == "HTTP/1.1 400 Bad Request"
    assert resp.headers["Content-Type"] == "application/json; charset=UTF-8"
    assert "Access-Control-Allow-Origin" not in resp.headers
    assert json.loads(resp.body) == {"error": "Missing required parameters"}
