"""Domain models representing ledger markets and normalized scores."""

from .models import (
    SPORTS_MARKET_PREFIX,
    ScoreLookup,
    LeagueAttempt,
    Market,
    Score,
    extract_event_id,
)

__all__ = [
    "SPORTS_MARKET_PREFIX",
    "ScoreLookup",
    "LeagueAttempt",
    "Market",
    "Score",
    "extract_event_id",
]
