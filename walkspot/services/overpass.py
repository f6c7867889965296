from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from walkspot.config import get_settings
from walkspot.services.cache import TTLCache, query_cache_key

logger = logging.getLogger(__name__)

_settings = get_settings()
_elements_cache: TTLCache[List[Dict[str, Any]]] = TTLCache(
    ttl_s=_settings.cache_ttl_s, max_size=_settings.cache_max_size
)

# Anything that can go wrong talking to one endpoint.
FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)


class OverpassUnavailableError(RuntimeError):
    """Both the primary and the fallback Overpass endpoints failed."""


async def _post_query(session: aiohttp.ClientSession, endpoint: str, query: str) -> Dict[str, Any]:
    settings = get_settings()
    headers = {"User-Agent": settings.user_agent}
    timeout = aiohttp.ClientTimeout(total=settings.http_timeout_s)

    async with session.post(endpoint, data={"data": query}, headers=headers, timeout=timeout) as resp:
        resp.raise_for_status()
        data = await resp.json(content_type=None)

    if not isinstance(data, dict):
        raise ValueError("Unexpected Overpass response")
    return data


async def fetch_elements(
    session: aiohttp.ClientSession,
    query: str,
    *,
    endpoints: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    """Run ``query`` and return its raw elements.

    The primary endpoint is tried first; on any failure, timeouts included,
    the fallback endpoint gets exactly one attempt.
    """
    settings = get_settings()
    if endpoints is None:
        endpoints = [str(settings.overpass_base_url), str(settings.overpass_fallback_url)]

    cache_key = query_cache_key("overpass", query)
    cached = _elements_cache.get(cache_key)
    if cached is not None:
        logger.debug("Overpass cache hit (%d elements)", len(cached))
        return cached

    last_error: Optional[BaseException] = None
    for attempt, endpoint in enumerate(endpoints):
        try:
            data = await _post_query(session, endpoint, query)
        except FETCH_ERRORS as e:
            last_error = e
            logger.warning("Overpass request to %s failed (attempt %d): %r", endpoint, attempt + 1, e)
            continue

        elements = data.get("elements")
        if not isinstance(elements, list):
            elements = []
        logger.info("Overpass returned %d elements from %s", len(elements), endpoint)
        _elements_cache.set(cache_key, elements)
        return elements

    raise OverpassUnavailableError(f"All Overpass endpoints failed: {last_error!r}") from last_error


def clear_cache() -> None:
    _elements_cache.clear()
