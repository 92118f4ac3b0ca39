"""Standalone job that resolves sports markets from final scores."""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Sequence

from loguru import logger

from app.core.config import Settings, get_settings
from app.core.logging import configure_logging
from app.domain import Market, Score, extract_event_id
from app.models import Outcome, ResolutionStatus, ScoreSource
from app.services.outcome import resolve_outcome
from app.services.polling import PollingScheduler, Priority
from app.services.score_cache import ScoreCache
from ingestion.client import LedgerClient
from ingestion.providers import ScoreProviderChain
from ingestion.service import get_or_fetch_score


@dataclass(slots=True)
class MarketResolutionRecord:
    market_id: str
    status: str
    outcome: str | None = None
    source: str | None = None
    priority: str | None = None
    error: str | None = None


@dataclass(slots=True)
class ResolutionSummary:
    checked: int = 0
    resolved: int = 0
    draws: int = 0
    home_wins: int = 0
    away_wins: int = 0
    pending: int = 0
    failed: int = 0
    skipped: int = 0
    cache_hits: int = 0
    primary_hits: int = 0
    fallback_hits: int = 0
    league_failures: int = 0
    cache_size: int = 0
    details: list[MarketResolutionRecord] = field(default_factory=list)

    def record(
        self,
        market: Market,
        status: ResolutionStatus | str,
        *,
        outcome: Outcome | None = None,
        score: Score | None = None,
        priority: Priority | None = None,
        error: str | None = None,
    ) -> None:
        self.details.append(
            MarketResolutionRecord(
                market_id=market.market_id,
                status=status.value if isinstance(status, ResolutionStatus) else status,
                outcome=outcome.value if outcome else None,
                source=score.source.value if score else None,
                priority=priority.level.value if priority else None,
                error=error,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["details"] = [asdict(detail) for detail in self.details]
        return payload


class ResolutionPipeline:
    """Resolve overdue sports markets in one sequential pass.

    The pipeline owns no durable state. The score cache is injected so a
    long-lived host can share it between invocations, but nothing here
    depends on a cache hit.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        gateway: LedgerClient | None = None,
        chain: ScoreProviderChain | None = None,
        cache: ScoreCache | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or get_settings()
        self.gateway = gateway or LedgerClient(
            base_url=str(self.settings.ledger_base_url),
            timeout=self.settings.ledger_timeout_seconds,
            clock=clock,
        )
        self.chain = chain or ScoreProviderChain.from_settings(self.settings)
        self.cache = cache if cache is not None else ScoreCache(clock=clock)
        self.scheduler = PollingScheduler(self.cache, clock=clock)
        self._sleep = sleep

    def run(
        self,
        *,
        market_ids: Sequence[str] | None = None,
        dry_run: bool = False,
    ) -> ResolutionSummary:
        summary = ResolutionSummary()
        logger.info("Resolve sports markets job started (dry_run={})", dry_run)

        markets = self.gateway.list_unresolved_sports_markets()
        if market_ids:
            wanted = set(market_ids)
            markets = [market for market in markets if market.market_id in wanted]
        logger.info("Found {} unresolved sports markets pending resolution", len(markets))

        seen: set[str] = set()
        for market in self.scheduler.prioritize(markets):
            if market.market_id in seen:
                logger.warning("Ledger listed {} twice; ignoring duplicate", market.market_id)
                continue
            seen.add(market.market_id)
            summary.checked += 1
            self._process_market(market, summary, dry_run=dry_run)

        summary.cache_size = len(self.cache)
        logger.info(
            "Resolve sports markets job completed: resolved={}, draws={}, home_wins={}, "
            "away_wins={}, pending={}, failed={}, skipped={}, cache_hits={}, league_failures={}",
            summary.resolved,
            summary.draws,
            summary.home_wins,
            summary.away_wins,
            summary.pending,
            summary.failed,
            summary.skipped,
            summary.cache_hits,
            summary.league_failures,
        )
        return summary

    def _process_market(self, market: Market, summary: ResolutionSummary, *, dry_run: bool) -> None:
        event_id = extract_event_id(market.market_id)
        if event_id is None:
            logger.warning("Invalid market ID format: {}", market.market_id)
            summary.failed += 1
            summary.record(market, ResolutionStatus.INVALID_MARKET_ID)
            return

        priority: Priority | None = None
        try:
            priority = self.scheduler.priority(market.resolution_time)
            if not self.scheduler.should_poll(event_id, market.resolution_time):
                cached = self.cache.get(event_id)
                if isinstance(cached, Score) and cached.is_final:
                    summary.cache_hits += 1
                    self._submit(market, cached, priority, summary, dry_run=dry_run)
                else:
                    logger.debug(
                        "Skipping {}; next {} priority poll not due yet",
                        market.market_id,
                        priority.level.value,
                    )
                    summary.skipped += 1
                    summary.record(
                        market,
                        ResolutionStatus.SKIPPED,
                        score=cached if isinstance(cached, Score) else None,
                        priority=priority,
                    )
                return

            result = get_or_fetch_score(
                self.cache,
                self.chain.lookup,
                event_id,
                resolution_time=market.resolution_time,
            )
            score = result.score
            if result.from_cache:
                summary.cache_hits += 1
            else:
                if result.lookup is not None:
                    summary.league_failures += result.lookup.league_failures
                if score is not None:
                    if score.source is ScoreSource.PRIMARY:
                        summary.primary_hits += 1
                    else:
                        summary.fallback_hits += 1

            if score is None:
                logger.info("No score data available for {}", market.market_id)
                summary.pending += 1
                summary.record(market, ResolutionStatus.NO_SCORE_DATA, priority=priority)
                return

            if not score.is_final:
                logger.info("Game not finished for {}: {}", market.market_id, score.status.value)
                summary.pending += 1
                summary.record(market, score.status.value, score=score, priority=priority)
                return

            self._submit(market, score, priority, summary, dry_run=dry_run)
        except Exception as exc:  # noqa: BLE001 - one market must not abort the run
            logger.exception("Error processing market {}", market.market_id)
            summary.failed += 1
            summary.record(market, ResolutionStatus.ERROR, priority=priority, error=str(exc))

    def _submit(
        self,
        market: Market,
        score: Score,
        priority: Priority,
        summary: ResolutionSummary,
        *,
        dry_run: bool,
    ) -> None:
        outcome = resolve_outcome(score)
        if outcome is None:
            summary.pending += 1
            summary.record(market, score.status.value, score=score, priority=priority)
            return

        if dry_run:
            logger.info(
                "Dry run: would resolve {} as {} ({}-{})",
                market.market_id,
                outcome.value,
                score.home_score,
                score.away_score,
            )
            summary.record(
                market, ResolutionStatus.DRY_RUN, outcome=outcome, score=score, priority=priority
            )
            return

        try:
            success = self.gateway.resolve_market(market.market_id, outcome)
        finally:
            self._sleep(self.settings.resolve_delay_seconds)

        if not success:
            summary.failed += 1
            summary.record(
                market,
                ResolutionStatus.RESOLUTION_FAILED,
                outcome=outcome,
                score=score,
                priority=priority,
            )
            return

        summary.resolved += 1
        if outcome is Outcome.DRAW:
            summary.draws += 1
            logger.info(
                "DRAW detected for {}: {}-{}. All bets will be refunded.",
                market.market_id,
                score.home_score,
                score.away_score,
            )
        elif outcome is Outcome.YES:
            summary.home_wins += 1
        else:
            summary.away_wins += 1
        summary.record(
            market, ResolutionStatus.RESOLVED, outcome=outcome, score=score, priority=priority
        )

    @property
    def cache_size(self) -> int:
        return len(self.cache)

    def close(self) -> None:
        self.chain.close()
        self.gateway.close()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Resolve overdue sports markets from provider scores",
    )
    parser.add_argument(
        "--market-id",
        dest="market_ids",
        action="append",
        help="Restrict the pass to specific market IDs (can be provided multiple times)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Determine outcomes without submitting them to the ledger",
    )
    parser.add_argument(
        "--summary-path",
        type=Path,
        default=None,
        help="Optional path where a JSON summary report will be written",
    )
    return parser.parse_args()


def _write_summary(summary: ResolutionSummary, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary.to_dict(), default=str, indent=2))
    logger.info("Resolution summary written to {}", path)


def main() -> ResolutionSummary:
    args = _parse_args()
    settings = get_settings()
    configure_logging(settings)
    pipeline = ResolutionPipeline(settings)
    try:
        summary = pipeline.run(market_ids=args.market_ids, dry_run=args.dry_run)
    finally:
        pipeline.close()

    if args.summary_path:
        _write_summary(summary, args.summary_path)
    return summary


if __name__ == "__main__":
    main()
