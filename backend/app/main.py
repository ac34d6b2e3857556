"""FastAPI application factory and main entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings, get_settings
from app.core.logging import get_logger, setup_logging
from app.price_alerts.application.interfaces.event_publisher import EventPublisher
from app.price_alerts.application.interfaces.price_cache import PriceCache
from app.price_alerts.application.services.price_fetcher import PriceFetcher
from app.price_alerts.application.use_cases.run_alert_cycle import RunAlertCycleUseCase
from app.price_alerts.infrastructure.cache.factory import create_price_cache
from app.price_alerts.infrastructure.db.session import dispose_engine, init_models
from app.price_alerts.infrastructure.external.coingecko_client import CoinGeckoClient
from app.price_alerts.infrastructure.repositories.sql_rule_repository import (
    rule_repository_scope,
)
from app.price_alerts.infrastructure.tasks.alert_scheduler import AlertScheduler, CycleFactory
from app.price_alerts.presentation.api import health, prices, rules
from app.price_alerts.presentation.realtime import websocket
from app.price_alerts.presentation.realtime.broadcaster import Broadcaster

settings = get_settings()
logger = get_logger(__name__)


def build_cycle_factory(
    settings: Settings,
    price_cache: PriceCache,
    price_fetcher: PriceFetcher,
    publisher: EventPublisher,
) -> CycleFactory:
    """Bind the shared collaborators of every alert cycle.

    Each cycle gets a fresh rule-store session; cache, fetcher and
    publisher are shared across cycles.
    """

    @asynccontextmanager
    async def cycle() -> AsyncIterator[RunAlertCycleUseCase]:
        async with rule_repository_scope() as rule_repository:
            yield RunAlertCycleUseCase(
                rule_repository=rule_repository,
                price_cache=price_cache,
                price_fetcher=price_fetcher,
                publisher=publisher,
                cache_ttl_seconds=settings.cache_ttl_seconds,
            )

    return cycle


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    setup_logging(level="DEBUG" if settings.debug else "INFO")
    logger.info("Price alert service starting up...")
    logger.info(f"Environment: {settings.app_env}")

    await init_models()

    price_cache = create_price_cache(settings)
    price_source = CoinGeckoClient(
        base_url=settings.price_api_base_url,
        api_key=settings.price_api_key or None,
        timeout=settings.fetch_timeout_seconds,
    )
    price_fetcher = PriceFetcher(
        price_source,
        quote_currency=settings.quote_currency,
        timeout_seconds=settings.fetch_timeout_seconds,
    )
    broadcaster = Broadcaster(
        rule_store=rule_repository_scope,
        queue_size=settings.subscriber_queue_size,
        quote_currency=settings.quote_currency,
    )
    scheduler = AlertScheduler(
        build_cycle_factory(settings, price_cache, price_fetcher, broadcaster),
        poll_interval_seconds=settings.poll_interval_seconds,
    )

    app.state.price_cache = price_cache
    app.state.broadcaster = broadcaster
    app.state.scheduler = scheduler

    logger.info(f"Cache TTL: {settings.cache_ttl_seconds}s, quote currency: {settings.quote_currency}")
    scheduler.start()

    yield

    # Shutdown
    logger.info("Price alert service shutting down...")
    await scheduler.stop()
    await broadcaster.close()
    await price_source.close()
    await price_cache.close()
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Price Alerts",
        description="Threshold alerts on live asset prices, pushed over WebSocket",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.is_development else None,
        redoc_url="/api/redoc" if settings.is_development else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(rules.router, prefix="/api", tags=["Rules"])
    app.include_router(prices.router, prefix="/api", tags=["Prices"])

    # Subscriber channel
    app.include_router(websocket.router, tags=["Realtime"])

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )
