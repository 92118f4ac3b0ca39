from __future__ import annotations

import time
from typing import Any, Callable

import httpx
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.domain import Market
from app.models import Outcome
from app.schemas import LedgerError, LedgerMarket, LedgerMarketList

MARKETS_PATH = "/predictions/markets"


class LedgerClient:
    """Thin wrapper around the prediction-market ledger endpoints."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.base_url = (base_url or str(settings.ledger_base_url)).rstrip("/")
        self.timeout = timeout or settings.ledger_timeout_seconds
        self._owns_client = client is None
        self.client = client or httpx.Client(base_url=self.base_url, timeout=self.timeout)
        self._clock = clock

    def fetch_unresolved_page(self) -> list[dict[str, Any]]:
        logger.info("Ledger GET {} include_resolved=false", MARKETS_PATH)
        response = self.client.get(MARKETS_PATH, params={"include_resolved": "false"})
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, list):
            return [item for item in payload if isinstance(item, dict)]
        return LedgerMarketList.model_validate(payload).markets

    def list_unresolved_sports_markets(self) -> list[Market]:
        """Return sports markets that are unresolved and past their resolution time.

        The ledger's ``include_resolved=false`` filter does not look at the
        deadline or the market family, so both are applied here.
        """

        now = self._clock()
        markets: list[Market] = []
        for raw in self.fetch_unresolved_page():
            try:
                parsed = LedgerMarket.model_validate(raw)
            except ValidationError as exc:
                logger.warning(
                    "Dropping malformed ledger market {}: {}",
                    raw.get("market_id"),
                    exc.errors()[:1],
                )
                continue
            market = Market(
                market_id=parsed.market_id,
                resolution_time=parsed.resolution_time,
                resolved=parsed.resolved,
                outcome=parsed.outcome,
                title=parsed.title,
                description=parsed.description,
                oracle_type=parsed.oracle_type,
                oracle_asset=parsed.oracle_asset,
                raw_data=raw,
            )
            if market.is_sports and market.is_due(now):
                markets.append(market)
        return markets

    def resolve_market(self, market_id: str, outcome: Outcome) -> bool:
        """Submit ``outcome`` for ``market_id``; ``False`` when the ledger refuses.

        A ``DRAW`` makes the ledger refund every participant.
        """

        path = f"{MARKETS_PATH}/{market_id}/resolve"
        try:
            response = self.client.post(path, json={"outcome": outcome.value})
        except httpx.HTTPError as exc:
            logger.error("Error resolving market {}: {}", market_id, exc)
            return False

        if not response.is_success:
            try:
                detail = LedgerError.model_validate(response.json()).detail
            except (ValueError, ValidationError):
                detail = None
            logger.error(
                "Failed to resolve {}: {}",
                market_id,
                detail or response.status_code,
            )
            return False

        logger.info("Resolved market {} as {}", market_id, outcome.value)
        return True

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "LedgerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
