"""
Shared HTTP plumbing for the database fetchers.

Every fetcher client wraps an ``httpx.AsyncClient``. A client passed in by
the caller is used as-is and left open; otherwise the fetcher creates one
and closes it again when used as an async context manager.
"""

import logging
import re
from typing import Any

import httpx

from ..config.settings import FetcherSettings
from ..errors import FetcherError


logger = logging.getLogger(__name__)


def process_id(name: str) -> str:
    """
    Turn a name into an identifier.

    Runs of non-alphanumeric characters become a single underscore, the
    result is lowercased and stripped of leading and trailing underscores.
    """
    return re.sub(r"[^a-zA-Z0-9]+", "_", name).lower().strip("_")


def strip_prefix(identifier: str, prefix: str) -> str:
    """Remove a case-insensitive ``PREFIX:`` from an identifier."""
    if identifier.lower().startswith(prefix.lower() + ":"):
        return identifier.split(":", 1)[1]
    return identifier


def create_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    """Create an HTTP client configured from fetcher settings."""
    settings = settings or FetcherSettings.from_env()
    return httpx.AsyncClient(
        timeout=settings.http_timeout,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    )


class BaseFetcher:
    """
    Base class for database clients.

    Subclasses set ``database`` (for messages and logs) and ``error_cls``
    (the FetcherError subclass raised on failure).
    """

    database = "database"
    error_cls: type[FetcherError] = FetcherError

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: FetcherSettings | None = None,
    ):
        self.settings = settings or FetcherSettings.from_env()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = create_http_client(self.settings)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request and raise the fetcher's error on failure.

        Raises:
            FetcherError: On a non-2xx status or a transport failure
        """
        logger.debug("%s %s", method, url, extra={"database": self.database, "url": url})
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self.error_cls(
                f"{self.database} returned HTTP {e.response.status_code}: {e.response.reason_phrase}",
                e,
            ) from e
        except httpx.HTTPError as e:
            raise self.error_cls(f"Connection to {self.database} failed: {e}", e) from e
        return response

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        response = await self.request("GET", url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise self.error_cls(f"Invalid JSON from {self.database}: {e}", e) from e
