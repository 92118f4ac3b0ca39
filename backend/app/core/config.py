from functools import lru_cache
from typing import Any

from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PRIMARY_LEAGUES: tuple[str, ...] = (
    "soccer_epl",
    "soccer_spain_la_liga",
    "soccer_germany_bundesliga",
    "soccer_italy_serie_a",
    "soccer_france_ligue_one",
    "soccer_usa_mls",
    "soccer_uefa_champs_league",
    "soccer_uefa_europa_league",
    "americanfootball_nfl",
    "americanfootball_ncaaf",
    "basketball_nba",
    "basketball_ncaab",
    "baseball_mlb",
    "icehockey_nhl",
    "mma_mixed_martial_arts",
    "boxing_boxing",
)

DEFAULT_FALLBACK_LEAGUES: tuple[str, ...] = (
    "soccer/eng.1",
    "soccer/usa.1",
    "soccer/esp.1",
    "soccer/ger.1",
    "soccer/ita.1",
    "soccer/fra.1",
    "soccer/uefa.champions",
    "soccer/uefa.europa",
    "football/nfl",
    "football/college-football",
    "basketball/nba",
    "basketball/mens-college-basketball",
    "baseball/mlb",
    "hockey/nhl",
)


def _split_csv(value: str) -> list[str]:
    return [item for item in (part.strip() for part in value.split(",")) if item]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode")
    environment: str = Field(
        default="development",
        description="Runtime environment (development|staging|production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level emitted by the loguru stderr sink",
    )
    ledger_base_url: AnyUrl | str = Field(
        default="https://api.0xnull.io/api",
        description="Base URL of the prediction-market ledger API",
    )
    ledger_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to ledger list and resolve calls",
        gt=0,
    )
    cron_secret: str | None = Field(
        default=None,
        description="Shared secret expected as a Bearer token on scheduled job triggers",
    )
    odds_api_key: str | None = Field(
        default=None,
        description="The Odds API key; when unset the primary score provider is skipped",
    )
    odds_api_base_url: AnyUrl | str = Field(
        default="https://api.the-odds-api.com",
        description="Base URL for The Odds API",
    )
    odds_api_days_from: int = Field(
        default=3,
        description="Number of past days of completed games requested from The Odds API",
        ge=1,
        le=3,
    )
    primary_timeout_seconds: float = Field(
        default=8.0,
        description="Hard timeout for each primary provider league request",
    )
    espn_base_url: AnyUrl | str = Field(
        default="https://site.api.espn.com",
        description="Base URL for the ESPN public scoreboard API",
    )
    fallback_timeout_seconds: float = Field(
        default=5.0,
        description="Hard timeout for each fallback provider league request",
    )
    primary_leagues: list[str] | str = Field(
        default_factory=lambda: list(DEFAULT_PRIMARY_LEAGUES),
        description="Comma-separated list or array of Odds API sport keys scanned for scores",
    )
    fallback_leagues: list[str] | str = Field(
        default_factory=lambda: list(DEFAULT_FALLBACK_LEAGUES),
        description="Comma-separated list or array of ESPN sport/league paths scanned for scores",
    )
    resolve_delay_seconds: float = Field(
        default=0.25,
        description="Pause inserted after every ledger resolution attempt",
        ge=0,
    )

    @field_validator("primary_timeout_seconds", "fallback_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("provider timeouts must be positive")
        return value

    @field_validator("primary_leagues", "fallback_leagues", mode="before")
    @classmethod
    def _parse_leagues(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            leagues = _split_csv(value)
        elif isinstance(value, (list, tuple, set)):
            leagues = [str(item).strip() for item in value if str(item).strip()]
        else:
            raise ValueError("league lists must be a list or comma-separated string")
        if not leagues:
            raise ValueError("league lists must contain at least one entry")
        return leagues

    @field_validator("cron_secret", "odds_api_key", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def primary_enabled(self) -> bool:
        return bool(self.odds_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
