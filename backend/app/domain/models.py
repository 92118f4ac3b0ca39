"""Typed domain representations shared by providers, the cache and the job."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.models import ScoreSource, ScoreStatus

SPORTS_MARKET_PREFIX = "sports_"


@dataclass(slots=True)
class Market:
    """Ledger market snapshot; read only to the reconciler."""

    market_id: str
    resolution_time: int
    resolved: int = 0
    outcome: str | None = None
    title: str | None = None
    description: str | None = None
    oracle_type: str | None = None
    oracle_asset: str | None = None
    raw_data: dict[str, Any] | None = None

    @property
    def is_sports(self) -> bool:
        return self.market_id.startswith(SPORTS_MARKET_PREFIX)

    def is_due(self, now: float) -> bool:
        return self.resolved == 0 and self.resolution_time <= now


@dataclass(slots=True, frozen=True)
class Score:
    """Provider-normalized score for one event."""

    home_score: int
    away_score: int
    home_team: str
    away_team: str
    status: ScoreStatus
    source: ScoreSource

    @property
    def is_final(self) -> bool:
        return self.status is ScoreStatus.FINAL


@dataclass(slots=True)
class LeagueAttempt:
    """Result of scanning one league scoreboard for an event."""

    provider: ScoreSource
    league: str
    matched: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(slots=True)
class ScoreLookup:
    score: Score | None
    attempts: list[LeagueAttempt] = field(default_factory=list)

    @property
    def league_failures(self) -> int:
        return sum(1 for attempt in self.attempts if attempt.failed)


def extract_event_id(market_id: str) -> str | None:
    """Return the event id embedded in ``sports_<event_id>_<slug>``.

    Returns ``None`` when the prefix is missing or no event id follows it.
    """

    if not market_id.startswith(SPORTS_MARKET_PREFIX):
        return None
    remainder = market_id[len(SPORTS_MARKET_PREFIX) :]
    event_id = remainder.split("_", 1)[0].strip()
    return event_id or None
