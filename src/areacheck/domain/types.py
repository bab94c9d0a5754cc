"""Shared type aliases used across the domain."""
from __future__ import annotations

from typing import TypeAlias

SessionId: TypeAlias = str
Timestamp: TypeAlias = str  # "YYYY-MM-DD HH:MM:SS", local wall clock
