"""Patches route — the one upstream endpoint this service proxies."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/patches")
async def get_patches(request: Request) -> JSONResponse:
    """Return the cached GitHub contents listing, fetching it on a cache miss.

    Errors from the cache chain propagate to the handlers in errors.py, which
    collapse them to a generic 500.
    """
    cache = request.app.state.patch_cache
    data = await cache.read_or_fetch(request.state.github_token)
    logger.debug("Serving patches listing (%d entries)", len(data) if isinstance(data, list) else 1)
    return JSONResponse(data)
