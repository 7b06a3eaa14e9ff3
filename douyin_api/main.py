"""FastAPI application entry point.

This module assembles all components and creates the main application.
"""

import asyncio
import contextlib
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from douyin_api import __version__
from douyin_api.api import admin, health, metrics, parse
from douyin_api.core.config import (
    Config,
    ConfigService,
    MonitoringConfig,
    SecurityConfig,
    ServerConfig,
)
from douyin_api.core.errors import APIError, global_exception_handler
from douyin_api.core.http import HttpClient
from douyin_api.core.logging import clear_request_id, configure_logging, set_request_id
from douyin_api.core.metrics import MetricsCollector, initialize_metrics
from douyin_api.middleware.auth import configure_auth
from douyin_api.providers.douyin import DouyinWebClient
from douyin_api.providers.tikhub import TikHubClient
from douyin_api.services.aggregator import QualityAggregator
from douyin_api.services.cache import CacheError, CacheStore, sweep_scheduler
from douyin_api.services.resolver import Resolver
from douyin_api.services.statistics import StatisticsFetcher

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds a request ID to the logging context and echoes it back."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP request metrics.

    Records request count and duration for all endpoints,
    using FastAPI route templates to normalize paths.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request and record metrics."""
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        # Fixed label for unmatched routes keeps cardinality bounded
        route = request.scope.get("route")
        endpoint = route.path if route else "/unmatched"

        MetricsCollector.record_request(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
            duration=duration,
        )

        return response


# Global service instances
_config: Optional[Config] = None
_http_client: Optional[HttpClient] = None
_cache_store: Optional[CacheStore] = None
_resolver: Optional[Resolver] = None
_sweep_task: Optional[asyncio.Task] = None


def get_config() -> Config:
    """Get the loaded configuration."""
    if _config is None:
        raise RuntimeError("Configuration not loaded")
    return _config


def get_cache_store() -> CacheStore:
    """Get the global cache store instance."""
    if _cache_store is None:
        raise RuntimeError("Cache store not configured")
    return _cache_store


def get_resolver() -> Resolver:
    """Get the global resolver instance."""
    if _resolver is None:
        raise RuntimeError("Resolver not configured")
    return _resolver


def build_http_client(config: Config) -> HttpClient:
    """Create the upstream transport, canned in test mode."""
    if config.testing.test_mode:
        from douyin_api.testing.fake_upstream import FakeUpstream

        logger.warning("Test mode enabled, upstream calls are served from fixtures")
        return FakeUpstream()

    return HttpClient(timeout=config.timeouts.upstream, verify_ssl=config.douyin.verify_ssl)


def build_resolver(config: Config, http: HttpClient, cache: CacheStore) -> Resolver:
    """Wire the resolution pipeline from its collaborators."""
    douyin = DouyinWebClient(http, config.douyin)
    tikhub = TikHubClient(http, config.tikhub)
    aggregator = QualityAggregator(http, StatisticsFetcher(tikhub), config.branding)
    return Resolver(
        douyin=douyin,
        tikhub=tikhub,
        cache=cache,
        aggregator=aggregator,
        sweep_on_request=config.cache.sweep_on_request,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown."""
    global _config, _http_client, _cache_store, _resolver, _sweep_task

    logger.info("Application starting", version=__version__)

    initialize_metrics(__version__)

    # Load configuration
    config_service = ConfigService()
    config = config_service.load()

    configure_logging(config.logging.level, config.logging.format)

    if not config.testing.test_mode:
        config_service.validate()
    _config = config

    logger.info(
        "Configuration loaded",
        server_port=config.server.port,
        cache_dir=config.cache.cache_dir,
        cache_ttl=config.cache.ttl,
        test_mode=config.testing.test_mode,
    )

    configure_auth(api_keys=config.security.api_keys)

    # Cache store; resolution still works uncached if the directory is unusable
    _cache_store = CacheStore(config.cache)
    try:
        _cache_store.initialize()
    except CacheError as e:
        logger.error("Cache directory unavailable", error=str(e))

    _http_client = build_http_client(config)
    _resolver = build_resolver(config, _http_client, _cache_store)
    logger.info("Resolver configured", tikhub_base_url=config.tikhub.base_url)

    if config.cache.sweep_interval > 0:
        _sweep_task = asyncio.create_task(
            sweep_scheduler(_cache_store, interval=config.cache.sweep_interval)
        )
        logger.info("Cache sweeper started", interval=config.cache.sweep_interval)

    logger.info("Application startup complete", version=__version__)

    yield

    # Shutdown
    logger.info("Application shutting down")

    if _sweep_task:
        _sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await _sweep_task
        _sweep_task = None

    if _http_client:
        await _http_client.close()

    _resolver = None
    _cache_store = None
    _http_client = None
    _config = None

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Douyin Resolver API",
        description="Resolves Douyin share links into watermark-free quality sources",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Default ["*"]; override via APP_SECURITY_CORS_ORIGINS
    security_config = SecurityConfig()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=security_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Register global exception handlers
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(APIError, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, global_exception_handler)

    # Override dependency injection for routers
    app.dependency_overrides[parse.get_resolver] = get_resolver
    app.dependency_overrides[admin.get_cache_store] = get_cache_store

    # Register routers
    app.include_router(health.router)
    app.include_router(parse.router)
    app.include_router(admin.router)
    if MonitoringConfig().metrics_enabled:
        app.include_router(metrics.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    server_config = ServerConfig()
    uvicorn.run(
        "douyin_api.main:app",
        host=server_config.host,
        port=server_config.port,
        workers=server_config.workers,
    )
