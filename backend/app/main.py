from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Iterator

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from pipelines.resolution_run import ResolutionPipeline

from . import schemas
from .core.config import Settings, get_settings, settings
from .core.logging import configure_logging
from .services.score_cache import ScoreCache

app = FastAPI(title="Sports Market Resolver", version="0.1.0", debug=settings.debug)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)
app.state.score_cache = ScoreCache()


@app.on_event("startup")
def on_startup() -> None:
    """Install the log sink once the API boots."""

    configure_logging(get_settings())


@app.get("/healthz", tags=["system"])
def healthcheck() -> dict[str, str]:
    """Basic readiness probe consumed by infrastructure monitors."""

    return {"status": "ok"}


def _settings() -> Settings:
    return get_settings()


def _score_cache(request: Request) -> ScoreCache:
    """Process-wide cache; it only lives as long as this worker."""

    return request.app.state.score_cache


def _resolution_pipeline(
    cache: ScoreCache = Depends(_score_cache),
    config: Settings = Depends(_settings),
) -> Iterator[ResolutionPipeline]:
    pipeline = ResolutionPipeline(config, cache=cache)
    try:
        yield pipeline
    finally:
        pipeline.close()


def _authorize(
    manual: Annotated[bool, Query(description="Operator-triggered run; skips the cron secret check")] = False,
    authorization: Annotated[str | None, Header()] = None,
    config: Settings = Depends(_settings),
) -> None:
    if manual:
        return
    if not config.cron_secret:
        logger.warning("CRON_SECRET is not configured; accepting unauthenticated job trigger")
        return
    if authorization != f"Bearer {config.cron_secret}":
        logger.warning("Unauthorized: invalid or missing cron secret")
        raise HTTPException(status_code=401, detail="Unauthorized")


@app.api_route(
    "/jobs/resolve-sports-markets",
    methods=["GET", "POST"],
    response_model=schemas.ResolutionRunResponse,
    responses={500: {"model": schemas.ErrorResponse}},
    tags=["jobs"],
    dependencies=[Depends(_authorize)],
)
def resolve_sports_markets(pipeline: ResolutionPipeline = Depends(_resolution_pipeline)):
    """Run one reconciliation pass and report its summary."""

    try:
        summary = pipeline.run()
    except Exception as exc:  # noqa: BLE001 - surfaced to the scheduler as a 500
        logger.exception("Resolve sports markets error")
        error = schemas.ErrorResponse(error=str(exc) or type(exc).__name__)
        return JSONResponse(status_code=500, content=error.model_dump())

    return schemas.ResolutionRunResponse.model_validate(
        {
            **summary.to_dict(),
            "cache_size": pipeline.cache_size,
            "timestamp": datetime.now(timezone.utc),
        }
    )
