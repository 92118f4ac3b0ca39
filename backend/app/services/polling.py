"""Deadline-driven polling cadence for unresolved markets."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from app.domain import Market
from app.models import PriorityLevel

from .score_cache import ScoreCache

HIGH_PRIORITY_WINDOW_SECONDS = 1800
MEDIUM_PRIORITY_WINDOW_SECONDS = 7200

_INTERVALS = {
    PriorityLevel.HIGH: 60,
    PriorityLevel.MEDIUM: 300,
    PriorityLevel.LOW: 900,
}

M = TypeVar("M", bound=Market)


@dataclass(slots=True, frozen=True)
class Priority:
    level: PriorityLevel
    min_interval: int


class PollingScheduler:
    """Decide how urgently a market's event should be re-polled.

    The priority is derived from ``resolution_time - now`` on every call, so a
    market escalates from ``low`` to ``high`` as its deadline approaches.
    """

    def __init__(
        self,
        cache: ScoreCache,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache = cache
        self._clock = clock

    def priority(self, resolution_time: int) -> Priority:
        delta = resolution_time - self._clock()
        if delta <= HIGH_PRIORITY_WINDOW_SECONDS:
            level = PriorityLevel.HIGH
        elif delta <= MEDIUM_PRIORITY_WINDOW_SECONDS:
            level = PriorityLevel.MEDIUM
        else:
            level = PriorityLevel.LOW
        return Priority(level=level, min_interval=_INTERVALS[level])

    def should_poll(self, event_id: str, resolution_time: int) -> bool:
        entry = self._cache.entry(event_id)
        if entry is None:
            return True
        if entry.value is not None and entry.value.is_final:
            return False
        elapsed = self._clock() - entry.cached_at
        return elapsed >= self.priority(resolution_time).min_interval

    def prioritize(self, markets: Iterable[M]) -> list[M]:
        """Return ``markets`` ordered ``high`` first; ties keep input order."""

        return sorted(markets, key=lambda market: self.priority(market.resolution_time).level.rank)
