"""Shared fixtures for session store tests."""
from __future__ import annotations

import itertools

import pytest

from areacheck.domain.coordinates import CoordinateTriple, EvaluationResult

_counter = itertools.count()


@pytest.fixture()
def make_result():
    """Factory for distinct results; x encodes a caller-chosen sequence number."""
    def _make(seq: int | None = None) -> EvaluationResult:
        n = next(_counter) if seq is None else seq
        return EvaluationResult(
            x=float(n),
            y=0.0,
            r=1.0,
            in_region=False,
            timestamp="2024-01-01 00:00:00",
            evaluation_micros=1.0,
        )
    return _make
