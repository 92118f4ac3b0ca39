"""Decoded shapes of the score provider payloads.

Only the fields the reconciler reads are declared; everything else is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class OddsApiTeamScore(_ProviderModel):
    name: str
    score: str | int | None = None


class OddsApiEvent(_ProviderModel):
    id: str
    sport_key: str | None = None
    commence_time: str | None = None
    completed: bool = False
    home_team: str
    away_team: str
    scores: list[OddsApiTeamScore] | None = None


class EspnTeam(_ProviderModel):
    display_name: str | None = Field(default=None, alias="displayName")
    short_display_name: str | None = Field(default=None, alias="shortDisplayName")
    name: str | None = None
    abbreviation: str | None = None

    @property
    def label(self) -> str:
        return (
            self.display_name
            or self.short_display_name
            or self.name
            or self.abbreviation
            or ""
        )


class EspnCompetitor(_ProviderModel):
    home_away: str | None = Field(default=None, alias="homeAway")
    score: str | int | None = None
    team: EspnTeam | None = None


class EspnStatusType(_ProviderModel):
    name: str | None = None
    state: str | None = None
    completed: bool | None = None


class EspnStatus(_ProviderModel):
    type: EspnStatusType | None = None


class EspnCompetition(_ProviderModel):
    status: EspnStatus | None = None
    competitors: list[EspnCompetitor] = Field(default_factory=list)


class EspnEvent(_ProviderModel):
    id: str
    uid: str | None = None
    name: str | None = None
    status: EspnStatus | None = None
    competitions: list[EspnCompetition] = Field(default_factory=list)


class EspnScoreboard(_ProviderModel):
    events: list[dict] = Field(default_factory=list)
