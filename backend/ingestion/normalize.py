from __future__ import annotations

from typing import Any, Iterable, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from app.domain import Score
from app.models import ScoreSource, ScoreStatus

from .payloads import EspnCompetitor, EspnEvent, OddsApiEvent

ESPN_FINAL_STATUSES = frozenset({"STATUS_FINAL", "STATUS_FULL_TIME", "FINAL"})

T = TypeVar("T", bound=BaseModel)


def _parse_score(value: Any) -> int | None:
    """Return an integer score, or ``None`` when the value is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        try:
            parsed = float(text)
        except ValueError:
            return None
        return int(parsed) if parsed.is_integer() else None


def ids_match(candidate: str | None, event_id: str) -> bool:
    """Provider ids are inconsistent, so accept equality or containment either way."""
    if not candidate or not event_id:
        return False
    return candidate == event_id or event_id in candidate or candidate in event_id


def iter_valid(model: type[T], raw_items: Iterable[Any], *, context: str) -> Iterable[T]:
    """Yield decoded items, dropping the ones missing required fields."""
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            yield model.model_validate(raw)
        except ValidationError as exc:
            logger.debug("Skipping malformed {} payload: {}", context, exc.errors()[:1])


def normalize_odds_api_event(event: OddsApiEvent) -> Score | None:
    scores_by_team: dict[str, int | None] = {}
    for entry in event.scores or []:
        scores_by_team[entry.name] = _parse_score(entry.score)

    home_score = scores_by_team.get(event.home_team)
    away_score = scores_by_team.get(event.away_team)

    if not event.completed:
        return Score(
            home_score=home_score or 0,
            away_score=away_score or 0,
            home_team=event.home_team,
            away_team=event.away_team,
            status=ScoreStatus.IN_PROGRESS,
            source=ScoreSource.PRIMARY,
        )

    if home_score is None or away_score is None:
        logger.warning(
            "Odds API marked event {} completed without parseable scores: {}",
            event.id,
            event.scores,
        )
        return None

    return Score(
        home_score=home_score,
        away_score=away_score,
        home_team=event.home_team,
        away_team=event.away_team,
        status=ScoreStatus.FINAL,
        source=ScoreSource.PRIMARY,
    )


def _find_side(competitors: list[EspnCompetitor], side: str) -> EspnCompetitor | None:
    return next((item for item in competitors if item.home_away == side), None)


def normalize_espn_event(event: EspnEvent) -> Score | None:
    if not event.competitions:
        return None
    competition = event.competitions[0]
    home = _find_side(competition.competitors, "home")
    away = _find_side(competition.competitors, "away")
    if home is None or away is None:
        return None

    status_type = (competition.status and competition.status.type) or (
        event.status and event.status.type
    )
    status_name = status_type.name if status_type else None
    completed = bool(status_type and status_type.completed)
    state = status_type.state if status_type else None

    if status_name in ESPN_FINAL_STATUSES or completed:
        status = ScoreStatus.FINAL
    elif state == "in":
        status = ScoreStatus.IN_PROGRESS
    elif state == "pre":
        status = ScoreStatus.SCHEDULED
    else:
        status = ScoreStatus.UNKNOWN

    home_score = _parse_score(home.score)
    away_score = _parse_score(away.score)
    if status is ScoreStatus.FINAL and (home_score is None or away_score is None):
        logger.warning("ESPN event {} is final without parseable scores", event.id)
        return None

    return Score(
        home_score=home_score or 0,
        away_score=away_score or 0,
        home_team=home.team.label if home.team else "",
        away_team=away.team.label if away.team else "",
        status=status,
        source=ScoreSource.FALLBACK,
    )
