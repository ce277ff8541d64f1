"""Readiness check route."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check — no external calls."""
    settings = request.app.state.settings
    return {
        "status": "ok",
        "service": "patches-proxy",
        "commit": settings.git_sha,
        "cache": await request.app.state.patch_cache.status(),
    }
