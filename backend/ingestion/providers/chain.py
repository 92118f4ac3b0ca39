"""Primary-then-fallback score lookup."""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from app.core.config import Settings
from app.domain import Score, ScoreLookup

from .base import ScoreProvider
from .espn import EspnScoreProvider
from .odds_api import OddsApiScoreProvider


class ScoreProviderChain:
    """Consult providers in order and return the first non-empty result.

    Any score from an earlier provider ends the lookup, including an
    ``in_progress`` one; later providers are only asked when every earlier
    provider found nothing.
    """

    def __init__(self, providers: Sequence[ScoreProvider]) -> None:
        if not providers:
            raise ValueError("ScoreProviderChain requires at least one provider")
        self.providers = tuple(providers)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScoreProviderChain":
        primary = OddsApiScoreProvider(
            api_key=settings.odds_api_key or "",
            leagues=settings.primary_leagues,
            base_url=str(settings.odds_api_base_url),
            days_from=settings.odds_api_days_from,
            timeout=settings.primary_timeout_seconds,
        )
        fallback = EspnScoreProvider(
            leagues=settings.fallback_leagues,
            base_url=str(settings.espn_base_url),
            timeout=settings.fallback_timeout_seconds,
        )
        if not primary.enabled:
            logger.info("ODDS_API_KEY not configured; scores come from the fallback provider only")
        return cls([primary, fallback])

    def lookup(self, event_id: str) -> ScoreLookup:
        combined = ScoreLookup(score=None)
        for provider in self.providers:
            result = provider.lookup(event_id)
            combined.attempts.extend(result.attempts)
            if result.score is not None:
                combined.score = result.score
                return combined

        if combined.attempts and all(attempt.failed for attempt in combined.attempts):
            logger.warning(
                "Every league request failed while looking up event {} ({} attempts)",
                event_id,
                len(combined.attempts),
            )
        else:
            logger.info("No provider reported a score for event {}", event_id)
        return combined

    def fetch(self, event_id: str) -> Score | None:
        return self.lookup(event_id).score

    def close(self) -> None:
        for provider in self.providers:
            provider.close()

    def __enter__(self) -> "ScoreProviderChain":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
