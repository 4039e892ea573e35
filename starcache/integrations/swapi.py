"""SWAPI REST API integration.

Docs: https://swapi.dev/documentation
Mirror: https://swapi.py4e.com/api

Non-2xx statuses, timeouts, network errors and malformed bodies raise UpstreamError.
"""

import logging
import time
from typing import Any

import httpx

from starcache.errors import UpstreamError

logger = logging.getLogger(__name__)

# Hosts the snapshot may have been captured from
KNOWN_BASE_URLS = (
    "https://swapi.py4e.com/api",
    "https://swapi.dev/api",
    "https://swapi.co/api",
    "http://swapi.py4e.com/api",
    "http://swapi.dev/api",
    "http://swapi.co/api",
)


class SwapiClient:
    """Async client for the SWAPI REST API."""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    async def fetch(self, url: str) -> dict[str, Any]:
        """GET a SWAPI URL and return its JSON object body."""
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url)
                elapsed_ms = int((time.monotonic() - start) * 1000)

                if not response.is_success:
                    logger.warning(
                        "SWAPI | status=%d | %dms | url=%s",
                        response.status_code, elapsed_ms, url,
                    )
                    raise UpstreamError(
                        url, f"{response.status_code} {response.text[:200]}",
                        status_code=response.status_code,
                    )

                data = self._parse_body(url, response)
                logger.info("SWAPI OK | %dms | url=%s", elapsed_ms, url)
                return data

        except httpx.TimeoutException:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.warning("SWAPI timeout | %dms | url=%s", elapsed_ms, url)
            raise UpstreamError(url, "timeout") from None
        except httpx.HTTPError as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.warning("SWAPI error | %dms | url=%s | %s", elapsed_ms, url, str(e)[:200])
            raise UpstreamError(url, str(e)[:200] or type(e).__name__) from e

    def _parse_body(self, url: str, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            logger.warning("SWAPI malformed body | url=%s", url)
            raise UpstreamError(url, "malformed JSON body", response.status_code) from e

        if not isinstance(data, dict):
            logger.warning("SWAPI unexpected body type | %s | url=%s", type(data).__name__, url)
            raise UpstreamError(url, "body is not a JSON object", response.status_code)
        return data
