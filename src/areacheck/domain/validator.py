"""Coordinate validation against the allowed input grid.

x is free-form within a closed range. y and r come from small discrete
sets (the UI offers them as buttons), so they are compared against each
member with an absolute tolerance to absorb decimal parsing round-off.

Validation never raises. A False result is mapped to a user-facing
"invalid data" response by the protocol adapter.
"""
from __future__ import annotations

import math
from collections.abc import Iterable

X_MIN = -5.0
X_MAX = 3.0
ALLOWED_Y: tuple[float, ...] = (-2.0, -1.5, -1.0, -0.5, 0.0, 0.5, 1.0, 1.5, 2.0)
ALLOWED_R: tuple[float, ...] = (1.0, 1.5, 2.0, 2.5, 3.0)
TOLERANCE = 1e-9


class CoordinatesValidator:
    """Checks a coordinate triple against range and discrete-set rules.

    Stateless after construction, safe to share between threads.

    Args:
        x_min, x_max: closed range for x.
        allowed_y: permitted y values.
        allowed_r: permitted r values.
        tolerance: absolute tolerance for y/r set membership (strict <).
    """

    def __init__(
        self,
        x_min: float = X_MIN,
        x_max: float = X_MAX,
        allowed_y: Iterable[float] = ALLOWED_Y,
        allowed_r: Iterable[float] = ALLOWED_R,
        tolerance: float = TOLERANCE,
    ) -> None:
        self._x_min = x_min
        self._x_max = x_max
        self._allowed_y = tuple(allowed_y)
        self._allowed_r = tuple(allowed_r)
        self._tolerance = tolerance

    def validate(self, x: float, y: float, r: float) -> bool:
        return self.check_x(x) and self.check_y(y) and self.check_r(r)

    def check_x(self, x: float) -> bool:
        return math.isfinite(x) and self._x_min <= x <= self._x_max

    def check_y(self, y: float) -> bool:
        return self._in_set(y, self._allowed_y)

    def check_r(self, r: float) -> bool:
        return self._in_set(r, self._allowed_r)

    def _in_set(self, value: float, allowed: tuple[float, ...]) -> bool:
        if not math.isfinite(value):
            return False
        return any(abs(value - candidate) < self._tolerance for candidate in allowed)


_DEFAULT = CoordinatesValidator()


def validate(x: float, y: float, r: float) -> bool:
    """Validate against the default grid."""
    return _DEFAULT.validate(x, y, r)
