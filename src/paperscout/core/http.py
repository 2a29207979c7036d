"""HTTP client — The fetch primitive every adapter uses.

Wraps a single ``httpx.AsyncClient`` and routes every request through the
shared ``RequestScheduler``.  Responses with an error status are raised as
``httpx.HTTPStatusError`` so the scheduler can classify them; retryable
statuses are retried, all others propagate unchanged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from paperscout.core.exceptions import ValidationError
from paperscout.core.scheduler import RequestScheduler

if TYPE_CHECKING:
    from paperscout.config.settings import HttpSettings

logger = logging.getLogger(__name__)


class HttpClient:
    """Scheduled HTTP client shared by all adapters.

    Args:
        scheduler: The global request scheduler.
        user_agent: Default outbound User-Agent header.
        timeout: Transport-level timeout in seconds. The scheduler enforces
            its own per-attempt timeout on top of this.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        scheduler: RequestScheduler,
        user_agent: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.scheduler = scheduler
        self._user_agent = user_agent
        self._client = httpx.AsyncClient(
            headers={"User-Agent": user_agent},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: HttpSettings,
        scheduler: RequestScheduler | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpClient:
        return cls(
            scheduler=scheduler or RequestScheduler.from_settings(settings),
            user_agent=settings.user_agent,
            timeout=settings.timeout_ms / 1000.0,
            transport=transport,
        )

    @property
    def user_agent(self) -> str:
        return self._user_agent

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Issue one scheduled request and return the successful response.

        Raises:
            TransientNetworkError: Retryable failure persisted past all retries.
            httpx.HTTPStatusError: Non-retryable error status.
            httpx.RequestError: Non-timeout transport failure.
        """

        async def _send() -> httpx.Response:
            response = await self._client.request(method, url, params=params, headers=headers)
            response.raise_for_status()
            return response

        response = await self.scheduler.execute(_send, label=f"{method} {url}")
        logger.debug("%s %s -> %d (%d bytes)", method, response.url, response.status_code, len(response.content))
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def get_text(self, url: str, **kwargs: Any) -> str:
        response = await self.get(url, **kwargs)
        return response.text

    async def get_bytes(self, url: str, **kwargs: Any) -> bytes:
        response = await self.get(url, **kwargs)
        return response.content

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            ValidationError: If the body is not valid JSON.
        """
        response = await self.get(url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ValidationError(f"Invalid JSON from {response.url}: {e}") from e
