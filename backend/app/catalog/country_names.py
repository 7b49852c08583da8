"""
Country display names from the REST Countries API.

Fetched once per process and cached.  A failed fetch is logged and leaves
the cache empty, so callers fall back to partner-supplied names and the
next sync tries again.
"""

from __future__ import annotations

import httpx

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_COUNTRY_NAMES: dict[str, str] = {}


async def fetch_country_names(transport: httpx.AsyncBaseTransport | None = None) -> dict[str, str]:
    """Return ``{ISO alpha-2: common name}``; never raises."""
    if _COUNTRY_NAMES:
        return _COUNTRY_NAMES

    try:
        async with httpx.AsyncClient(timeout=15.0, transport=transport) as client:
            response = await client.get(settings.REST_COUNTRIES_URL)
        if not response.is_success:
            logger.error("Country name lookup failed", status_code=response.status_code)
            return _COUNTRY_NAMES
        countries = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Country name lookup failed", error=str(exc))
        return _COUNTRY_NAMES

    for country in countries:
        code = country.get("cca2")
        name = (country.get("name") or {}).get("common")
        if code and name:
            _COUNTRY_NAMES[code.upper()] = name

    logger.info("Country names cached", count=len(_COUNTRY_NAMES))
    return _COUNTRY_NAMES


def clear_cache() -> None:
    _COUNTRY_NAMES.clear()
