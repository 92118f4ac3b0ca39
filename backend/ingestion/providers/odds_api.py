"""Primary score provider backed by The Odds API ``/scores`` endpoint."""

from __future__ import annotations

from typing import Any, Sequence

import httpx

from app.core.config import settings
from app.domain import Score
from app.models import ScoreSource
from ingestion.normalize import ids_match, iter_valid, normalize_odds_api_event
from ingestion.payloads import OddsApiEvent

from .base import LeagueFetchError, ScoreboardProvider


class OddsApiScoreProvider(ScoreboardProvider):
    source = ScoreSource.PRIMARY
    abort_on_unauthorized = True

    def __init__(
        self,
        *,
        api_key: str | None = None,
        leagues: Sequence[str] | None = None,
        base_url: str | None = None,
        days_from: int | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = settings.odds_api_key if api_key is None else api_key
        self.days_from = days_from or settings.odds_api_days_from
        super().__init__(
            leagues=leagues or settings.primary_leagues,
            base_url=base_url or str(settings.odds_api_base_url),
            timeout=timeout or settings.primary_timeout_seconds,
            client=client,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def fetch_league(self, league: str) -> list[Any]:
        payload = self._get_json(
            f"/v4/sports/{league}/scores",
            params={"apiKey": self.api_key, "daysFrom": self.days_from},
        )
        if not isinstance(payload, list):
            raise LeagueFetchError("unexpected scores payload shape")
        return payload

    def match_event(self, raw_events: list[Any], event_id: str) -> tuple[bool, Score | None]:
        for event in iter_valid(OddsApiEvent, raw_events, context="Odds API event"):
            if ids_match(event.id, event_id):
                return True, normalize_odds_api_event(event)
        return False, None
