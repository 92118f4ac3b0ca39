"""Score providers and the primary/fallback chain."""

from .base import LeagueFetchError, ProviderAuthError, ScoreboardProvider, ScoreProvider
from .chain import ScoreProviderChain
from .espn import EspnScoreProvider
from .odds_api import OddsApiScoreProvider

__all__ = [
    "EspnScoreProvider",
    "LeagueFetchError",
    "OddsApiScoreProvider",
    "ProviderAuthError",
    "ScoreProvider",
    "ScoreProviderChain",
    "ScoreboardProvider",
]
