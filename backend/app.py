"""FastAPI application entry point for the patches proxy."""

import logging
import sys
from contextlib import asynccontextmanager
from functools import partial

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, load_settings
from errors import AuthError, error_response, register_error_handlers
from services.cache import Fetcher, PatchCache
from services.github_client import fetch_patches
from services.scheduler import build_scheduler

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    # Structured logging: JSON for production, human-readable for local
    if settings.is_production:
        logging.basicConfig(
            level=logging.INFO,
            format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
            stream=sys.stdout,
        )
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def create_app(
    settings: Settings | None = None,
    fetcher: Fetcher | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app.

    Also usable as a uvicorn factory: ``uvicorn --factory app:create_app``.
    ``fetcher`` replaces the GitHub call outright; ``transport`` keeps the real
    GitHub client but swaps its httpx transport (tests pass a MockTransport).
    """
    settings = settings or load_settings()
    configure_logging(settings)
    if fetcher is None:
        fetcher = partial(fetch_patches, url=settings.patches_url, transport=transport)
    patch_cache = PatchCache(settings.cache_path, fetcher, enabled=settings.cache_enabled)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        missing = settings.validate()
        if missing:
            logger.warning("Missing env vars (requests may be rejected or fail upstream): %s", ", ".join(missing))

        scheduler = None
        if settings.cache_enabled:
            scheduler = build_scheduler(patch_cache, settings.github_token, settings.refresh_cron)
            scheduler.start()
            logger.info("Patches refresh scheduled (%s)", settings.refresh_cron)
        app.state.scheduler = scheduler

        logger.info("Server is running on port %d", settings.port)
        yield
        if scheduler is not None:
            scheduler.shutdown(wait=False)

    app = FastAPI(title="Patches Proxy", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.patch_cache = patch_cache

    # Access gate: every request needs the shared secret in x-api-key
    @app.middleware("http")
    async def require_api_key(request: Request, call_next):
        provided = request.headers.get("x-api-key")
        if settings.api_key is None or provided != settings.api_key:
            logger.info("Rejected %s %s: bad or missing x-api-key", request.method, request.url.path)
            return error_response(AuthError())
        request.state.github_token = settings.github_token
        return await call_next(request)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.patches import router as patches_router

    app.include_router(health_router)
    app.include_router(patches_router)

    return app


def serve() -> None:
    """Console entry point: run uvicorn on HOST:PORT."""
    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    serve()
