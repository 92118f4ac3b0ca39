from __future__ import annotations

from app.domain import Score
from app.models import Outcome


def resolve_outcome(score: Score) -> Outcome | None:
    """Map a final score to a ledger outcome; ``None`` until the game is final.

    ``YES`` is the home team winning and ``NO`` the away team winning. Markets
    must be created with the same home/away convention.
    """

    if not score.is_final:
        return None
    if score.home_score > score.away_score:
        return Outcome.YES
    if score.away_score > score.home_score:
        return Outcome.NO
    return Outcome.DRAW
