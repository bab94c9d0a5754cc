"""Region membership test for a point (x, y) against radius r.

The region is built from three pieces, one per quadrant:

    x >= 0, y >= 0   quarter disk:  x^2 + y^2 <= r^2
    x >= 0, y <= 0   rectangle:     x <= r and y >= -r/2
    x <= 0, y <= 0   triangle:      x + y >= -r/2
    x <  0, y >  0   nothing

The checks run in that order, so points on an axis belong to the
first piece whose condition they satisfy. (0, -1) is tested against
the rectangle, (-1, 0) against the triangle.

Callers must reject NaN and infinities first: every comparison with
NaN is False, which would silently report "outside".
"""
from __future__ import annotations


def is_in_region(x: float, y: float, r: float) -> bool:
    """Return True if (x, y) lies inside the region for radius r."""
    if x >= 0 and y >= 0:
        return x * x + y * y <= r * r

    if x >= 0 and y <= 0:
        return x <= r and y >= -r / 2

    if x <= 0 and y <= 0:
        return -r / 2 <= x + y

    return False
