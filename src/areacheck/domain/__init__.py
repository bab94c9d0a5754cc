"""Domain model for areacheck.

Re-exports the public types and pure functions:
    from areacheck.domain import EvaluationResult, is_in_region, validate
"""
from areacheck.domain.coordinates import (
    TIMESTAMP_FORMAT,
    CoordinateTriple,
    EvaluationResult,
)
from areacheck.domain.region import is_in_region
from areacheck.domain.types import SessionId, Timestamp
from areacheck.domain.validator import (
    ALLOWED_R,
    ALLOWED_Y,
    TOLERANCE,
    X_MAX,
    X_MIN,
    CoordinatesValidator,
    validate,
)

__all__ = [
    "TIMESTAMP_FORMAT",
    "CoordinateTriple",
    "EvaluationResult",
    "is_in_region",
    "SessionId",
    "Timestamp",
    "ALLOWED_R",
    "ALLOWED_Y",
    "TOLERANCE",
    "X_MAX",
    "X_MIN",
    "CoordinatesValidator",
    "validate",
]
