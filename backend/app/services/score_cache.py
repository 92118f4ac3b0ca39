"""In-memory score lookup cache with finality-dependent TTLs."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Final

from loguru import logger

from app.domain import Score

FINAL_TTL_SECONDS: Final = 3600.0
LIVE_TTL_SECONDS: Final = 30.0
NOT_FOUND_TTL_SECONDS: Final = 120.0


class _Absent(Enum):
    ABSENT = "absent"

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent.ABSENT
"""Returned by :meth:`ScoreCache.get` when nothing usable is cached.

Distinct from ``None``, which is a cached "event not found" result.
"""


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """One cached lookup result.

    ``resolution_time`` is recorded for diagnostics only; scheduling always
    uses the deadline of the market being processed.
    """

    event_id: str
    value: Score | None
    cached_at: float
    ttl: float
    resolution_time: int | None = None

    def expired(self, now: float) -> bool:
        return now - self.cached_at >= self.ttl


def ttl_for(value: Score | None) -> float:
    if value is None:
        return NOT_FOUND_TTL_SECONDS
    if value.is_final:
        return FINAL_TTL_SECONDS
    return LIVE_TTL_SECONDS


class ScoreCache:
    """Best-effort memo of provider lookups keyed by event id.

    Entries are evicted lazily on read once their TTL elapses. Nothing
    persists beyond the owning process, and a miss only costs an extra
    provider call.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def entry(self, event_id: str) -> CacheEntry | None:
        """Return the live entry for ``event_id``, evicting it if expired."""

        entry = self._entries.get(event_id)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            self._entries.pop(event_id, None)
            logger.debug("Evicted expired score cache entry for {}", event_id)
            return None
        return entry

    def get(self, event_id: str) -> Score | None | _Absent:
        entry = self.entry(event_id)
        if entry is None:
            return ABSENT
        return entry.value

    def put(
        self,
        event_id: str,
        value: Score | None,
        resolution_time: int | None = None,
    ) -> CacheEntry:
        ttl = min(ttl_for(value), FINAL_TTL_SECONDS)
        entry = CacheEntry(
            event_id=event_id,
            value=value,
            cached_at=self._clock(),
            ttl=ttl,
            resolution_time=resolution_time,
        )
        self._entries[event_id] = entry
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, event_id: object) -> bool:
        return isinstance(event_id, str) and self.entry(event_id) is not None
