"""GitHub contents API client — the single upstream call this service proxies.

Unlike a general GitHub client, this only ever lists one directory
(xenia-canary/game-patches/patches) and hands the JSON back untouched.
"""

import logging
from typing import Any

import httpx

from config import DEFAULT_PATCHES_URL
from errors import FetchError

logger = logging.getLogger(__name__)


async def fetch_patches(
    token: str | None,
    url: str = DEFAULT_PATCHES_URL,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """GET the patches listing and return the decoded JSON body.

    Args:
        token: GitHub token, sent as ``Authorization: token <token>``. Omitted if None.
        url: Contents API URL to list.
        transport: Optional httpx transport (tests pass an ``httpx.MockTransport``).

    Raises:
        FetchError: network failure, non-2xx status, or a body that isn't JSON.
    """
    headers = {"Accept": "application/vnd.github+json"}
    if token:
        headers["Authorization"] = f"token {token}"

    logger.info("Fetching patches listing from %s", url)
    try:
        async with httpx.AsyncClient(transport=transport) as client:
            resp = await client.get(url, headers=headers)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.error("GitHub returned %d for %s", status, url)
        raise FetchError(f"GitHub API error: {status}", upstream_status=status) from e
    except httpx.HTTPError as e:
        logger.error("GitHub request failed for %s: %s", url, e)
        raise FetchError(f"GitHub request failed: {e}") from e

    try:
        return resp.json()
    except ValueError as e:
        raise FetchError(f"GitHub returned non-JSON body: {e}", upstream_status=resp.status_code) from e
