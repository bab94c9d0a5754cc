"""CoordinateTriple and EvaluationResult: the values that flow per request.

A CoordinateTriple lives for one request. An EvaluationResult is created
once the point has been checked and is then owned by the session log it
is appended to. Both are frozen.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from areacheck.domain.types import Timestamp

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True, slots=True)
class CoordinateTriple:
    """A point plus the region radius it is tested against."""
    x: float
    y: float
    r: float


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Immutable record of one region check.

    evaluation_micros covers numeric parsing through the predicate,
    the same window the response reports as executionTime (in ms).
    """
    x: float
    y: float
    r: float
    in_region: bool
    timestamp: Timestamp
    evaluation_micros: float

    @classmethod
    def create(
        cls,
        point: CoordinateTriple,
        in_region: bool,
        evaluation_micros: float,
        now: datetime | None = None,
    ) -> EvaluationResult:
        """Factory: stamp the result with the current local wall-clock time."""
        moment = now or datetime.now()
        return cls(
            x=point.x,
            y=point.y,
            r=point.r,
            in_region=in_region,
            timestamp=moment.strftime(TIMESTAMP_FORMAT),
            evaluation_micros=evaluation_micros,
        )

    @property
    def execution_time_ms(self) -> float:
        return self.evaluation_micros / 1000.0

    def to_dict(self) -> dict[str, Any]:
        """Wire representation used inside {"results": [...]}."""
        return {
            "x": self.x,
            "y": self.y,
            "r": self.r,
            "inArea": self.in_region,
            "currentTime": self.timestamp,
            "executionTime": self.execution_time_ms,
        }

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> EvaluationResult:
        """Rebuild a result from its wire representation."""
        return cls(
            x=float(obj["x"]),
            y=float(obj["y"]),
            r=float(obj["r"]),
            in_region=bool(obj["inArea"]),
            timestamp=obj["currentTime"],
            evaluation_micros=float(obj["executionTime"]) * 1000.0,
        )
