from __future__ import annotations

import httpx
import pytest

from app.domain import LeagueAttempt, Market, Score, ScoreLookup
from app.models import Outcome, ScoreSource, ScoreStatus
from app.services.score_cache import FINAL_TTL_SECONDS, ScoreCache
from ingestion.providers import EspnScoreProvider, OddsApiScoreProvider, ScoreProviderChain
from pipelines.resolution_run import ResolutionPipeline


class StubGateway:
    def __init__(self, markets: list[Market], *, accept: bool = True) -> None:
        self.markets = markets
        self.accept = accept
        self.resolutions: list[tuple[str, Outcome]] = []
        self.closed = False

    def list_unresolved_sports_markets(self) -> list[Market]:
        return list(self.markets)

    def resolve_market(self, market_id: str, outcome: Outcome) -> bool:
        self.resolutions.append((market_id, outcome))
        if self.accept:
            self.markets = [market for market in self.markets if market.market_id != market_id]
        return self.accept

    def close(self) -> None:
        self.closed = True


class StubChain:
    def __init__(self, scores: dict[str, Score | None] | None = None) -> None:
        self.scores = scores or {}
        self.calls: list[str] = []
        self.closed = False

    def lookup(self, event_id: str) -> ScoreLookup:
        self.calls.append(event_id)
        if isinstance(self.scores.get(event_id), Exception):
            raise self.scores[event_id]
        return ScoreLookup(
            score=self.scores.get(event_id),
            attempts=[LeagueAttempt(provider=ScoreSource.PRIMARY, league="stub", error="HTTP 503")],
        )

    def close(self) -> None:
        self.closed = True


def _score(home: int, away: int, *, status=ScoreStatus.FINAL, source=ScoreSource.PRIMARY) -> Score:
    return Score(
        home_score=home,
        away_score=away,
        home_team="Home",
        away_team="Away",
        status=status,
        source=source,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


def _pipeline(test_settings, clock, sleeps, gateway, chain, cache=None) -> ResolutionPipeline:
    settings = test_settings.model_copy(update={"resolve_delay_seconds": 0.25})
    return ResolutionPipeline(
        settings,
        gateway=gateway,
        chain=chain,
        cache=cache if cache is not None else ScoreCache(clock=clock),
        clock=clock,
        sleep=sleeps.append,
    )


def _market(market_id: str, clock, offset: int = -500) -> Market:
    return Market(market_id=market_id, resolution_time=int(clock.now) + offset)


def test_resolves_final_scores_and_counts_outcomes(test_settings, clock, sleeps):
    gateway = StubGateway(
        [
            _market("sports_home_a-b", clock),
            _market("sports_away_c-d", clock),
            _market("sports_draw_e-f", clock),
        ]
    )
    chain = StubChain(
        {
            "home": _score(3, 1),
            "away": _score(0, 2, source=ScoreSource.FALLBACK),
            "draw": _score(1, 1),
        }
    )

    summary = _pipeline(test_settings, clock, sleeps, gateway, chain).run()

    assert gateway.resolutions == [
        ("sports_home_a-b", Outcome.YES),
        ("sports_away_c-d", Outcome.NO),
        ("sports_draw_e-f", Outcome.DRAW),
    ]
    assert (summary.resolved, summary.home_wins, summary.away_wins, summary.draws) == (3, 1, 1, 1)
    assert (summary.primary_hits, summary.fallback_hits) == (2, 1)
    assert summary.league_failures == 3
    assert summary.checked == 3
    assert summary.cache_size == 3
    assert sleeps == [0.25, 0.25, 0.25]
    assert {detail.status for detail in summary.details} == {"resolved"}


def test_pending_when_no_score_or_game_unfinished(test_settings, clock, sleeps):
    gateway = StubGateway([_market("sports_live_x", clock), _market("sports_unknown_y", clock)])
    chain = StubChain({"live": _score(1, 0, status=ScoreStatus.IN_PROGRESS)})

    summary = _pipeline(test_settings, clock, sleeps, gateway, chain).run()

    assert summary.pending == 2
    assert summary.resolved == 0
    assert gateway.resolutions == []
    assert sleeps == []
    statuses = {detail.market_id: (detail.status, detail.source) for detail in summary.details}
    assert statuses == {
        "sports_live_x": ("in_progress", "primary"),
        "sports_unknown_y": ("no_score_data", None),
    }


def test_invalid_market_id_counts_as_failed(test_settings, clock, sleeps):
    gateway = StubGateway([_market("sports_", clock), _market("sports_ok_x", clock)])
    chain = StubChain({"ok": _score(2, 0)})

    summary = _pipeline(test_settings, clock, sleeps, gateway, chain).run()

    assert summary.failed == 1
    assert summary.resolved == 1
    assert summary.details[0].status == "invalid_market_id"
    assert chain.calls == ["ok"]


def test_market_error_is_isolated(test_settings, clock, sleeps):
    gateway = StubGateway([_market("sports_boom_x", clock), _market("sports_ok_y", clock)])
    chain = StubChain({"boom": RuntimeError("provider exploded"), "ok": _score(0, 1)})

    summary = _pipeline(test_settings, clock, sleeps, gateway, chain).run()

    assert summary.failed == 1
    assert summary.resolved == 1
    failed = summary.details[0]
    assert (failed.market_id, failed.status, failed.error) == ("sports_boom_x", "error", "provider exploded")
    assert failed.priority == "high"


def test_listing_failure_aborts_run(test_settings, clock, sleeps):
    class BrokenGateway(StubGateway):
        def list_unresolved_sports_markets(self) -> list[Market]:
            raise httpx.ConnectError("ledger down")

    pipeline = _pipeline(test_settings, clock, sleeps, BrokenGateway([]), StubChain())

    with pytest.raises(httpx.ConnectError):
        pipeline.run()


def test_skips_market_until_poll_interval_elapses(test_settings, clock, sleeps):
    gateway = StubGateway([_market("sports_live_x", clock)])
    chain = StubChain({"live": _score(0, 0, status=ScoreStatus.IN_PROGRESS)})
    cache = ScoreCache(clock=clock)
    pipeline = _pipeline(test_settings, clock, sleeps, gateway, chain, cache)

    pipeline.run()
    clock.advance(20)
    second = pipeline.run()

    assert chain.calls == ["live"]
    assert second.skipped == 1
    assert second.details[0].status == "skipped"
    assert second.details[0].source == "primary"

    clock.advance(60)
    third = pipeline.run()
    assert chain.calls == ["live", "live"]
    assert third.pending == 1


def test_not_found_result_served_from_cache_within_ttl(test_settings, clock, sleeps):
    gateway = StubGateway([_market("sports_ghost_x", clock)])
    chain = StubChain()
    cache = ScoreCache(clock=clock)
    pipeline = _pipeline(test_settings, clock, sleeps, gateway, chain, cache)

    pipeline.run()
    clock.advance(90)
    second = pipeline.run()

    assert chain.calls == ["ghost"]
    assert second.cache_hits == 1
    assert second.pending == 1


def test_failed_resolution_retries_from_cache_without_provider_call(test_settings, clock, sleeps):
    market = _market("sports_evt9_x-y", clock)
    gateway = StubGateway([market], accept=False)
    chain = StubChain({"evt9": _score(4, 2)})
    cache = ScoreCache(clock=clock)
    pipeline = _pipeline(test_settings, clock, sleeps, gateway, chain, cache)

    first = pipeline.run()
    assert first.failed == 1
    assert first.details[0].status == "resolution_failed"

    gateway.accept = True
    clock.advance(600)
    second = pipeline.run()

    assert chain.calls == ["evt9"]
    assert second.cache_hits == 1
    assert second.resolved == 1
    assert gateway.resolutions == [("sports_evt9_x-y", Outcome.YES), ("sports_evt9_x-y", Outcome.YES)]
    assert sleeps == [0.25, 0.25]

    third = pipeline.run()
    assert third.checked == 0


def test_duplicate_listing_is_processed_once(test_settings, clock, sleeps):
    market = _market("sports_dup_x", clock)
    gateway = StubGateway([market, market])
    chain = StubChain({"dup": _score(1, 0)})

    summary = _pipeline(test_settings, clock, sleeps, gateway, chain).run()

    assert summary.resolved == 1
    assert gateway.resolutions == [("sports_dup_x", Outcome.YES)]


def test_dry_run_does_not_touch_ledger(test_settings, clock, sleeps):
    gateway = StubGateway([_market("sports_dry_x", clock)])
    chain = StubChain({"dry": _score(0, 3)})

    summary = _pipeline(test_settings, clock, sleeps, gateway, chain).run(dry_run=True)

    assert gateway.resolutions == []
    assert summary.resolved == 0
    assert summary.details[0].status == "dry_run"
    assert summary.details[0].outcome == "NO"


def test_market_id_filter(test_settings, clock, sleeps):
    gateway = StubGateway([_market("sports_a_x", clock), _market("sports_b_y", clock)])
    chain = StubChain({"a": _score(1, 0), "b": _score(1, 0)})

    summary = _pipeline(test_settings, clock, sleeps, gateway, chain).run(market_ids=["sports_b_y"])

    assert summary.checked == 1
    assert chain.calls == ["b"]


def test_high_priority_markets_processed_first(test_settings, clock, sleeps):
    gateway = StubGateway(
        [
            _market("sports_later_x", clock, offset=10_000),
            _market("sports_now_y", clock, offset=-100),
        ]
    )
    chain = StubChain()

    _pipeline(test_settings, clock, sleeps, gateway, chain).run()

    assert chain.calls == ["now", "later"]


def test_end_to_end_fallback_resolution(test_settings, clock, sleeps, mock_client):
    espn_event = {
        "id": "espn-evt123",
        "uid": "s:600~l:700~e:espn-evt123",
        "competitions": [
            {
                "status": {"type": {"name": "STATUS_FINAL", "state": "post", "completed": True}},
                "competitors": [
                    {"homeAway": "home", "score": "3", "team": {"displayName": "A"}},
                    {"homeAway": "away", "score": "0", "team": {"displayName": "B"}},
                ],
            }
        ],
    }
    odds_requests: list[httpx.Request] = []

    def odds_handler(request: httpx.Request) -> httpx.Response:
        odds_requests.append(request)
        return httpx.Response(200, json=[])

    def espn_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"events": [espn_event]})

    chain = ScoreProviderChain(
        [
            OddsApiScoreProvider(
                api_key="",
                leagues=["basketball_nba"],
                client=mock_client(odds_handler, base_url="https://odds.test"),
            ),
            EspnScoreProvider(
                leagues=["soccer/eng.1"],
                client=mock_client(espn_handler, base_url="https://espn.test"),
            ),
        ]
    )
    gateway = StubGateway([_market("sports_evt123_teamA-teamB", clock)])
    cache = ScoreCache(clock=clock)

    summary = _pipeline(test_settings, clock, sleeps, gateway, chain, cache).run()

    assert odds_requests == []
    entry = cache.entry("evt123")
    assert entry is not None
    assert entry.ttl == FINAL_TTL_SECONDS
    assert entry.value.source is ScoreSource.FALLBACK
    assert gateway.resolutions == [("sports_evt123_teamA-teamB", Outcome.YES)]
    assert (summary.resolved, summary.home_wins, summary.fallback_hits) == (1, 1, 1)
