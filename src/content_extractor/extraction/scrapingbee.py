"""JS-rendered HTML from the ScrapingBee API, rotating through configured keys."""

import logging

import httpx

from content_extractor.errors import ExtractionError, NetworkError, classify_exception, classify_status

logger = logging.getLogger(__name__)

API_URL = "https://app.scrapingbee.com/api/v1/"
REQUEST_TIMEOUT = 30.0

# Statuses that mean "this key is spent or refused", so the next key is tried
_ROTATE_STATUSES = {401, 403, 429}


async def render_html(url: str, api_keys: list[str]) -> str:
    """Return rendered HTML for ``url``.

    Each key is tried once, in order. Raises the last classified error when no
    key succeeds.
    """
    if not api_keys:
        raise ExtractionError("no ScrapingBee keys configured")

    last_error: ExtractionError = NetworkError("ScrapingBee request failed")
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
        for index, key in enumerate(api_keys, start=1):
            params = {
                "api_key": key,
                "url": url,
                "render_js": "true",
                "premium_proxy": "true",
                "country_code": "us",
            }
            try:
                resp = await client.get(API_URL, params=params)
            except httpx.HTTPError as exc:
                last_error = classify_exception(exc)
                logger.warning("ScrapingBee key %d/%d failed: %s", index, len(api_keys), exc)
                continue

            if resp.status_code == 200:
                return resp.text

            last_error = classify_status(resp.status_code, f"ScrapingBee returned {resp.status_code}")
            if resp.status_code in _ROTATE_STATUSES or resp.status_code >= 500:
                logger.warning("ScrapingBee key %d/%d rejected (%d), rotating", index, len(api_keys), resp.status_code)
            else:
                logger.warning("ScrapingBee key %d/%d returned %d", index, len(api_keys), resp.status_code)
    raise last_error
