"""Shared league-scanning behaviour for score providers."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

import httpx
from loguru import logger

from app.domain import LeagueAttempt, Score, ScoreLookup
from app.models import ScoreSource


class ProviderAuthError(RuntimeError):
    """Raised when a provider rejects the configured credential."""


class LeagueFetchError(RuntimeError):
    """Raised when a league scoreboard cannot be fetched or decoded."""


class ScoreProvider(Protocol):
    """Interface implemented by provider adapters."""

    source: ScoreSource

    def lookup(self, event_id: str) -> ScoreLookup:
        """Scan the provider's leagues for ``event_id``."""

    def close(self) -> None:
        """Release the underlying HTTP client."""


class ScoreboardProvider:
    """Iterate a fixed league list and stop at the first event matching the id.

    Subclasses implement :meth:`fetch_league` (one HTTP call returning the raw
    event list) and :meth:`match_event` (decode, match and normalize).
    """

    source: ScoreSource
    # Only credentialed providers treat a 401 as fatal for the whole scan.
    abort_on_unauthorized = False

    def __init__(
        self,
        *,
        leagues: Sequence[str],
        base_url: str,
        timeout: float,
        client: httpx.Client | None = None,
    ) -> None:
        self.leagues = tuple(leagues)
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)

    @property
    def enabled(self) -> bool:
        return True

    def fetch_league(self, league: str) -> list[Any]:
        raise NotImplementedError

    def match_event(self, raw_events: list[Any], event_id: str) -> tuple[bool, Score | None]:
        raise NotImplementedError

    def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        try:
            response = self.client.get(path, params=params, timeout=self.timeout)
        except httpx.HTTPError as exc:
            raise LeagueFetchError(f"{type(exc).__name__}: {exc}") from exc
        if response.status_code == 401 and self.abort_on_unauthorized:
            raise ProviderAuthError(f"{self.source.value} provider rejected credential")
        if not response.is_success:
            raise LeagueFetchError(f"HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise LeagueFetchError("response body is not JSON") from exc

    def lookup(self, event_id: str) -> ScoreLookup:
        result = ScoreLookup(score=None)
        if not self.enabled:
            logger.debug("{} score provider disabled; skipping", self.source.value)
            return result

        for league in self.leagues:
            attempt = LeagueAttempt(provider=self.source, league=league)
            result.attempts.append(attempt)
            try:
                raw_events = self.fetch_league(league)
            except ProviderAuthError as exc:
                attempt.error = str(exc)
                logger.warning(
                    "{}; aborting remaining {} leagues for event {}",
                    exc,
                    self.source.value,
                    event_id,
                )
                break
            except LeagueFetchError as exc:
                attempt.error = str(exc)
                logger.debug(
                    "{} league {} unavailable for event {}: {}",
                    self.source.value,
                    league,
                    event_id,
                    exc,
                )
                continue

            matched, score = self.match_event(raw_events, event_id)
            attempt.matched = matched
            if score is not None:
                logger.info(
                    "{} provider found event {} in {}: {} {}-{} {} ({})",
                    self.source.value,
                    event_id,
                    league,
                    score.home_team,
                    score.home_score,
                    score.away_score,
                    score.away_team,
                    score.status.value,
                )
                result.score = score
                return result

        return result

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "ScoreboardProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
