"""FastAPI read endpoints over the current price snapshot."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from aggregator import AggregationRunner
from cache import PriceCache

logger = logging.getLogger(__name__)

_NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
}


def create_app(
    cache: PriceCache,
    runner: Optional[AggregationRunner] = None,
    start_scheduler: bool = False,
) -> FastAPI:
    """Build the app. Reads never wait on or trigger a refresh."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = None
        if start_scheduler and runner is not None:
            from scheduler import start_background_scheduler
            scheduler = start_background_scheduler(runner)
        yield
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    app = FastAPI(title="Egypt Construction Prices", lifespan=lifespan)

    def _prices() -> JSONResponse:
        return JSONResponse(cache.to_dicts(), headers=_NO_CACHE_HEADERS)

    def _health() -> dict:
        return {"ok": True, "count": len(cache.items()), "updatedAt": cache.snapshot.updated_at}

    app.add_api_route("/prices", _prices, methods=["GET"])
    # Route name used by the first clients
    app.add_api_route("/getPrices", _prices, methods=["GET"])
    app.add_api_route("/", _health, methods=["GET"])
    app.add_api_route("/health", _health, methods=["GET"])

    return app
