from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from app.domain import Score, ScoreLookup
from app.services.score_cache import ABSENT, ScoreCache


@dataclass(slots=True)
class CachedLookup:
    score: Score | None
    from_cache: bool
    lookup: ScoreLookup | None = None


def get_or_fetch_score(
    cache: ScoreCache,
    fetch: Callable[[str], ScoreLookup],
    event_id: str,
    *,
    resolution_time: int | None = None,
) -> CachedLookup:
    """Cache-aside score lookup.

    A cached value (including a cached "not found") is returned without any
    provider call; on a miss ``fetch`` runs and its result is stored.
    """

    cached = cache.get(event_id)
    if cached is not ABSENT:
        logger.debug("Score cache hit for event {}", event_id)
        return CachedLookup(score=cached, from_cache=True)

    lookup = fetch(event_id)
    cache.put(event_id, lookup.score, resolution_time)
    return CachedLookup(score=lookup.score, from_cache=False, lookup=lookup)
