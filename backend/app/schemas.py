from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class LedgerMarket(BaseModel):
    """Market row returned by the ledger listing endpoint."""

    model_config = ConfigDict(extra="allow")

    market_id: str
    resolution_time: int
    resolved: int = 0
    outcome: str | None = None
    title: str | None = None
    description: str | None = None
    oracle_type: str | None = None
    oracle_asset: str | None = None

    @field_validator("resolved", mode="before")
    @classmethod
    def _coerce_resolved(cls, value: Any) -> int:
        if value is None:
            return 0
        if isinstance(value, bool):
            return int(value)
        return value

    @field_validator("resolution_time", mode="before")
    @classmethod
    def _coerce_resolution_time(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(value)
        return value


class LedgerMarketList(BaseModel):
    markets: list[dict[str, Any]] = Field(default_factory=list)


class LedgerError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    detail: Any = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResolutionDetail(_CamelModel):
    market_id: str
    outcome: str | None = None
    status: str
    source: str | None = None
    priority: str | None = None
    error: str | None = None


class ResolutionRunResponse(_CamelModel):
    success: bool = True
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
    details: list[ResolutionDetail] = Field(default_factory=list)
    cache_size: int = 0
    timestamp: datetime


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
