"""
HTTP client for the UK Parliament Hansard API.

Every upstream call in the pipeline goes through :meth:`HansardClient.fetch_json`,
which applies the retry policy: HTTP 429 and 400 are retried a fixed number
of extra times with a linearly growing delay; any other failure is raised
immediately as :class:`HansardAPIError`.

Responsibility: Single GET-with-retry primitive plus the logical API operations
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional
import logging

import httpx

from ..config import HansardAPIConfig
from ..utils.retry import RetryError, retry_async

logger = logging.getLogger(__name__)

MAX_SEARCH_PAGE_SIZE = 50


class HansardAPIError(RuntimeError):
    """Raised when a Hansard API request fails for good."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: Optional[int] = None,
        retries_exhausted: bool = False,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.retries_exhausted = retries_exhausted


class HansardClient:
    """
    Async client for the Hansard API.

    Example:
        async with HansardClient() as client:
            sections = await client.get_sections_for_day(date(2024, 5, 23), "Commons")
    """

    def __init__(
        self,
        config: Optional[HansardAPIConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: API settings (base URL, timeout, retry budget)
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.config = config or HansardAPIConfig()
        self.max_retries = self.config.max_retries
        self.retry_base_delay = self.config.retry_base_delay
        self.client = httpx.AsyncClient(
            base_url=self.config.base_url.rstrip("/"),
            timeout=self.config.timeout_seconds,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "HansardClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def fetch_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET ``path`` and return the decoded JSON body.

        Raises:
            HansardAPIError: on non-retryable status, transport failure,
                undecodable body, or once the retry budget is spent
        """
        async def attempt() -> Any:
            response = await self.client.get(path, params=params)
            if not response.is_success:
                raise HansardAPIError(
                    f"HTTP error! status: {response.status_code}",
                    url=str(response.request.url),
                    status_code=response.status_code,
                )
            try:
                return response.json()
            except ValueError as exc:
                raise HansardAPIError(
                    f"Invalid JSON body: {exc}",
                    url=str(response.request.url),
                ) from exc

        try:
            return await retry_async(
                attempt,
                max_attempts=self.max_retries + 1,
                base_delay=self.retry_base_delay,
                logger_instance=logger,
            )
        except RetryError as exc:
            logger.error(
                "API fetch error: retries exhausted for %s (status %s)",
                path,
                exc.status_code,
            )
            raise HansardAPIError(
                f"HTTP error! status: {exc.status_code} (retries exhausted)",
                url=path,
                status_code=exc.status_code,
                retries_exhausted=True,
            ) from exc
        except HansardAPIError as exc:
            logger.error("API fetch error: %s (url=%s)", exc, exc.url)
            raise
        except httpx.HTTPError as exc:
            logger.error("API fetch error: %s (path=%s)", exc, path)
            raise HansardAPIError(str(exc) or type(exc).__name__, url=path) from exc

    # MARK: Logical operations

    async def get_last_sitting_date(self, chamber: str) -> str:
        """Latest sitting date for ``chamber`` as the raw date string."""
        payload = await self.fetch_json(
            "/overview/lastsittingdate.json", params={"house": chamber}
        )
        return str(payload).replace('"', "").strip()

    async def get_sections_for_day(self, sitting_date: date, chamber: str) -> Any:
        """Section names available for a sitting day (expected: list of str)."""
        return await self.fetch_json(
            "/overview/sectionsforday.json",
            params={"date": sitting_date.isoformat(), "house": chamber},
        )

    async def get_section_tree(self, sitting_date: date, chamber: str, section: str) -> Any:
        """Section tree forest for one section (expected: list of tree items)."""
        return await self.fetch_json(
            "/overview/sectiontrees.json",
            params={
                "house": chamber,
                "date": sitting_date.isoformat(),
                "section": section,
            },
        )

    async def get_record(self, external_id: str) -> Any:
        """Full record body (Overview, Items, ChildDebates, ...)."""
        return await self.fetch_json(f"/debates/debate/{external_id}.json")

    async def get_speakers(self, external_id: str) -> Any:
        """Speaker list for a record."""
        return await self.fetch_json(f"/debates/speakerslist/{external_id}.json")

    async def search_members(
        self,
        skip: int = 0,
        take: int = MAX_SEARCH_PAGE_SIZE,
        **filters: Any,
    ) -> Dict[str, Any]:
        """
        One page of the member search.

        Args:
            skip: Number of results to skip
            take: Page size, capped at 50
            **filters: Search parameters (``name``, ``includeCurrent``, ...)
        """
        params: Dict[str, Any] = {
            key: str(value).lower() if isinstance(value, bool) else value
            for key, value in filters.items()
        }
        params["skip"] = skip
        params["take"] = min(take, MAX_SEARCH_PAGE_SIZE)
        payload = await self.fetch_json("/search/members.json", params=params)
        return payload if isinstance(payload, dict) else {}

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
