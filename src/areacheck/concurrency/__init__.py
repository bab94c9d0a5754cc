"""Locking primitives for the session table."""
from areacheck.concurrency.rwlock import ReadWriteLock

__all__ = ["ReadWriteLock"]
