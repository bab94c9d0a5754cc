"""areacheck: point-in-region evaluation served over a raw gateway protocol."""

__version__ = "0.1.0"
