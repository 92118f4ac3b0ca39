"""Fallback score provider backed by ESPN's public scoreboards."""

from __future__ import annotations

from typing import Any, Sequence

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.domain import Score
from app.models import ScoreSource
from ingestion.normalize import ids_match, iter_valid, normalize_espn_event
from ingestion.payloads import EspnEvent, EspnScoreboard

from .base import LeagueFetchError, ScoreboardProvider


class EspnScoreProvider(ScoreboardProvider):
    source = ScoreSource.FALLBACK

    def __init__(
        self,
        *,
        leagues: Sequence[str] | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        super().__init__(
            leagues=leagues or settings.fallback_leagues,
            base_url=base_url or str(settings.espn_base_url),
            timeout=timeout or settings.fallback_timeout_seconds,
            client=client,
        )

    def fetch_league(self, league: str) -> list[Any]:
        payload = self._get_json(f"/apis/site/v2/sports/{league}/scoreboard")
        try:
            scoreboard = EspnScoreboard.model_validate(payload)
        except ValidationError as exc:
            raise LeagueFetchError("unexpected scoreboard payload shape") from exc
        return scoreboard.events

    def match_event(self, raw_events: list[Any], event_id: str) -> tuple[bool, Score | None]:
        for event in iter_valid(EspnEvent, raw_events, context="ESPN event"):
            if not (ids_match(event.id, event_id) or (event.uid and event_id in event.uid)):
                continue
            score = normalize_espn_event(event)
            if score is None:
                # An unusable match (no competitors yet) keeps the scan going.
                continue
            return True, score
        return False, None
