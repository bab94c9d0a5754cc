"""The request loop that drives a gateway."""
from areacheck.server.loop import RequestLoop

__all__ = ["RequestLoop"]
