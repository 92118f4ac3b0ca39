from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import httpx
import pytest

from app.core.config import Settings

DATA_DIR = Path(__file__).parent / "data"
NOW = 1_760_000_500.0


class FakeClock:
    """Manually advanced stand-in for ``time.time``."""

    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def load_json(name: str):
    return json.loads((DATA_DIR / name).read_text(encoding="utf-8"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def odds_api_payload() -> list[dict[str, object]]:
    return load_json("odds_api_scores.json")


@pytest.fixture
def espn_payload() -> dict[str, object]:
    return load_json("espn_scoreboard.json")


@pytest.fixture
def ledger_payload() -> dict[str, object]:
    return load_json("ledger_markets.json")


@pytest.fixture
def mock_client():
    """Build an ``httpx.Client`` whose requests are answered by ``handler``."""

    clients: list[httpx.Client] = []

    def factory(handler, *, base_url: str = "https://provider.test") -> httpx.Client:
        client = httpx.Client(base_url=base_url, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def test_settings(monkeypatch) -> Settings:
    settings = Settings(
        _env_file=None,
        ledger_base_url="https://ledger.test/api",
        odds_api_key=None,
        cron_secret="s3cret",
        primary_leagues="basketball_nba,soccer_epl",
        fallback_leagues="soccer/eng.1,basketball/nba",
        resolve_delay_seconds=0,
    )
    monkeypatch.setattr("app.core.config.get_settings", lambda: settings)
    monkeypatch.setattr("app.core.config.settings", settings)
    return settings
