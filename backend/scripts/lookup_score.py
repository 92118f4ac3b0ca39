import argparse
import json

from loguru import logger

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.domain import extract_event_id
from app.services.outcome import resolve_outcome
from ingestion.providers import ScoreProviderChain


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Look up the score providers report for one event")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--event-id", help="Provider event id to search for")
    target.add_argument("--market-id", help="Ledger market id (sports_<event_id>_<slug>)")
    parser.add_argument(
        "--show-attempts",
        action="store_true",
        help="Print every league request made while searching",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    configure_logging(settings)

    event_id = args.event_id
    if args.market_id:
        event_id = extract_event_id(args.market_id)
        if event_id is None:
            logger.error("Market id {} does not embed an event id", args.market_id)
            raise SystemExit(2)

    with ScoreProviderChain.from_settings(settings) as chain:
        lookup = chain.lookup(event_id)

    report: dict[str, object] = {"event_id": event_id, "score": None, "outcome": None}
    if lookup.score is not None:
        outcome = resolve_outcome(lookup.score)
        report["score"] = {
            "home_team": lookup.score.home_team,
            "away_team": lookup.score.away_team,
            "home_score": lookup.score.home_score,
            "away_score": lookup.score.away_score,
            "status": lookup.score.status.value,
            "source": lookup.score.source.value,
        }
        report["outcome"] = outcome.value if outcome else None
    report["league_failures"] = lookup.league_failures
    if args.show_attempts:
        report["attempts"] = [
            {
                "provider": attempt.provider.value,
                "league": attempt.league,
                "matched": attempt.matched,
                "error": attempt.error,
            }
            for attempt in lookup.attempts
        ]
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
