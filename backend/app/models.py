from __future__ import annotations

from enum import Enum


class Outcome(str, Enum):
    """Ledger outcome values. ``YES`` is always the home team winning."""

    YES = "YES"
    NO = "NO"
    DRAW = "DRAW"


class ScoreStatus(str, Enum):
    FINAL = "final"
    IN_PROGRESS = "in_progress"
    SCHEDULED = "scheduled"
    UNKNOWN = "unknown"


class ScoreSource(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class PriorityLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    PriorityLevel.HIGH: 0,
    PriorityLevel.MEDIUM: 1,
    PriorityLevel.LOW: 2,
}


class ResolutionStatus(str, Enum):
    """Per-market status recorded in a run's ``details``."""

    RESOLVED = "resolved"
    RESOLUTION_FAILED = "resolution_failed"
    NO_SCORE_DATA = "no_score_data"
    SKIPPED = "skipped"
    INVALID_MARKET_ID = "invalid_market_id"
    DRY_RUN = "dry_run"
    ERROR = "error"
