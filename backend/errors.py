"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

MSG_UNAUTHORIZED = "Host your own API."
MSG_FETCH_FAILED = "Failed to fetch patches data"


class PatchesProxyError(Exception):
    """Base exception with HTTP status code.

    ``public_message`` is what the client sees; the exception message itself
    is only logged.
    """

    public_message = MSG_FETCH_FAILED

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class AuthError(PatchesProxyError):
    public_message = MSG_UNAUTHORIZED

    def __init__(self, message: str = "Invalid or missing x-api-key header"):
        super().__init__(message, status_code=401)


class FetchError(PatchesProxyError):
    """Upstream unreachable, non-2xx, or returned something that isn't JSON."""

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message, status_code=500)
        self.upstream_status = upstream_status


class CacheError(PatchesProxyError):
    def __init__(self, message: str, path: str):
        super().__init__(message, status_code=500)
        self.path = path


class CacheParseError(CacheError):
    pass


class CacheWriteError(CacheError):
    pass


def error_response(exc: PatchesProxyError) -> JSONResponse:
    return JSONResponse({"error": exc.public_message}, status_code=exc.status_code)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(PatchesProxyError)
    async def handle_proxy_error(request: Request, exc: PatchesProxyError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            {"error": MSG_FETCH_FAILED},
            status_code=500,
        )
