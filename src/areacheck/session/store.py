"""Session-keyed, append-only result log.

Each session id maps to an ordered history of EvaluationResults. The
table is partitioned into N stripes, stripe = hash(session_id) & (N - 1),
and every stripe has its own ReadWriteLock. Two sessions only contend
when they land on the same stripe; there is no lock over the whole table.

Per-key guarantees:
  - append() is atomic: concurrent appends to one id never lose entries.
  - get_history() returns a tuple snapshot taken under the stripe's read
    lock, so its length cannot change while the caller holds it.
  - a caller's own sequential appends keep their order.

Nothing is ever deleted. Memory grows with the total number of requests
served; this is accepted. Passing max_history caps each history and
drops the oldest entries first.

The table is an instance, not a module global. Build one per server (or
per test) and inject it into the ProtocolAdapter.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque

from areacheck.concurrency.rwlock import ReadWriteLock
from areacheck.domain.coordinates import EvaluationResult
from areacheck.domain.types import SessionId

History = tuple[EvaluationResult, ...]


class SessionStore(ABC):
    """Interface the protocol adapter talks to."""

    @abstractmethod
    def append(self, session_id: SessionId, result: EvaluationResult) -> None:
        """Append result to the session's history, creating it if needed."""
        ...

    @abstractmethod
    def get_history(self, session_id: SessionId) -> History:
        """Snapshot of the session's history (empty for unknown ids)."""
        ...

    @abstractmethod
    def append_and_snapshot(
        self, session_id: SessionId, result: EvaluationResult
    ) -> History:
        """Append, then return the history including the new entry."""
        ...

    @abstractmethod
    def session_count(self) -> int:
        """Number of known sessions."""
        ...

    @abstractmethod
    def session_ids(self) -> list[SessionId]:
        """Snapshot of known session ids."""
        ...


class StripedSessionStore(SessionStore):
    """SessionStore with striped read-write locks.

    Args:
        num_stripes: Number of lock stripes (default 16, must be power of 2).
        max_history: Optional per-session cap. None keeps everything.
    """

    def __init__(self, num_stripes: int = 16, max_history: int | None = None) -> None:
        if num_stripes <= 0 or (num_stripes & (num_stripes - 1)) != 0:
            raise ValueError("num_stripes must be a positive power of 2")
        if max_history is not None and max_history <= 0:
            raise ValueError("max_history must be positive or None")
        self._num_stripes = num_stripes
        self._mask = num_stripes - 1
        self._max_history = max_history
        self._stripes: list[dict[SessionId, deque[EvaluationResult]]] = [
            {} for _ in range(num_stripes)
        ]
        self._locks: list[ReadWriteLock] = [
            ReadWriteLock() for _ in range(num_stripes)
        ]

    @property
    def num_stripes(self) -> int:
        return self._num_stripes

    @property
    def max_history(self) -> int | None:
        return self._max_history

    def append(self, session_id: SessionId, result: EvaluationResult) -> None:
        self._append(session_id, result, snapshot=False)

    def append_and_snapshot(
        self, session_id: SessionId, result: EvaluationResult
    ) -> History:
        """Append and snapshot under one write-lock hold.

        A POST response built from this snapshot always contains the
        entry it just created, even if another caller appends to the
        same session right after.
        """
        return self._append(session_id, result, snapshot=True)

    def get_history(self, session_id: SessionId) -> History:
        idx = self._stripe_index(session_id)
        with self._locks[idx].read():
            history = self._stripes[idx].get(session_id)
            return tuple(history) if history is not None else ()

    def session_count(self) -> int:
        """Total sessions across all stripes.

        Stripes are read one after another, so this is not a
        point-in-time snapshot under concurrent appends.
        """
        total = 0
        for i in range(self._num_stripes):
            with self._locks[i].read():
                total += len(self._stripes[i])
        return total

    def session_ids(self) -> list[SessionId]:
        """Same caveat as session_count(): not atomic across stripes."""
        ids: list[SessionId] = []
        for i in range(self._num_stripes):
            with self._locks[i].read():
                ids.extend(self._stripes[i].keys())
        return ids

    def _append(
        self, session_id: SessionId, result: EvaluationResult, snapshot: bool
    ) -> History:
        if not session_id or not session_id.strip():
            raise ValueError("session_id must be a non-empty string")
        idx = self._stripe_index(session_id)
        with self._locks[idx].write():
            stripe = self._stripes[idx]
            history = stripe.get(session_id)
            if history is None:
                history = deque(maxlen=self._max_history)
                stripe[session_id] = history
            history.append(result)
            return tuple(history) if snapshot else ()

    def _stripe_index(self, session_id: SessionId) -> int:
        return hash(session_id) & self._mask
