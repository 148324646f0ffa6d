"""
Scryfall API client.

Scryfall is the canonical source of card identities, printings and
reference prices. Requests are rate limited, retried on 429 with
Retry-After/exponential backoff, and guarded by a circuit breaker;
transport failures surface as ``UpstreamUnavailable``.
"""
import asyncio
import time
from typing import Any, AsyncIterator, Optional

import httpx
import structlog

from mtg_catalog.core.circuit_breaker import CircuitBreaker, get_circuit_breaker
from mtg_catalog.core.config import settings
from mtg_catalog.core.exceptions import UpstreamUnavailable

logger = structlog.get_logger()

USER_AGENT = "MTGCatalogEngine/1.0"
MAX_RETRY_WAIT_SECONDS = 60.0


class ScryfallClient:
    """
    Async client for the Scryfall REST API.

    Usage:
        async with ScryfallClient() as client:
            card = await client.get_card("0000579f-7b35-4ed3-b44c-db2a538066fe")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        rate_limit_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_factor: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.base_url = (base_url or settings.scryfall_base_url).rstrip("/")
        self.rate_limit_seconds = (
            settings.scryfall_rate_limit_ms / 1000 if rate_limit_seconds is None else rate_limit_seconds
        )
        self.max_retries = settings.scryfall_max_retries if max_retries is None else max_retries
        self.backoff_factor = settings.scryfall_backoff_factor if backoff_factor is None else backoff_factor
        self.timeout = float(settings.external_api_timeout if timeout is None else timeout)
        self.breaker = breaker or get_circuit_breaker("scryfall")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._last_request_time: Optional[float] = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "ScryfallClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _rate_limit(self) -> None:
        """Enforce the minimum gap between requests."""
        if self._last_request_time is not None:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self.rate_limit_seconds:
                await asyncio.sleep(self.rate_limit_seconds - elapsed)
        self._last_request_time = time.monotonic()

    def _retry_wait(self, response: httpx.Response, retry_count: int) -> float:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return min(float(retry_after), MAX_RETRY_WAIT_SECONDS)
            except ValueError:
                pass
        return min(self.backoff_factor ** retry_count, MAX_RETRY_WAIT_SECONDS)

    async def _request(self, endpoint: str, params: Optional[dict] = None) -> Optional[dict]:
        """
        GET ``endpoint``; None on 404.

        Raises:
            UpstreamUnavailable: Transport error, retries exhausted, 5xx, or
                circuit open
        """
        retry_count = 0
        while True:
            async with self._lock:
                await self._rate_limit()
                client = await self._get_client()
                try:
                    async with self.breaker:
                        response = await client.get(endpoint, params=params)
                        if response.status_code >= 500:
                            response.raise_for_status()
                except httpx.HTTPError as e:
                    logger.error("Scryfall request failed", endpoint=endpoint, error=str(e))
                    raise UpstreamUnavailable(f"Scryfall request failed: {e}", endpoint=endpoint) from e

            if response.status_code == 429:
                if retry_count >= self.max_retries:
                    logger.error("Scryfall rate limit exceeded, max retries reached", endpoint=endpoint)
                    raise UpstreamUnavailable("Scryfall rate limit exceeded", endpoint=endpoint)
                wait_seconds = self._retry_wait(response, retry_count)
                retry_count += 1
                logger.warning(
                    "Scryfall rate limit hit, retrying",
                    endpoint=endpoint,
                    retry_count=retry_count,
                    wait_seconds=wait_seconds,
                )
                await asyncio.sleep(wait_seconds)
                continue

            if response.status_code == 404:
                return None
            if response.status_code >= 400:
                logger.error("Scryfall API error", endpoint=endpoint, status=response.status_code)
                raise UpstreamUnavailable(
                    f"Scryfall returned {response.status_code}",
                    endpoint=endpoint,
                    status=response.status_code,
                )
            return response.json()

    async def get_card(self, source_id: str) -> Optional[dict[str, Any]]:
        """Card JSON by Scryfall id, or None if unknown."""
        return await self._request(f"/cards/{source_id}")

    async def get_card_by_set_number(self, set_code: str, collector_number: str) -> Optional[dict[str, Any]]:
        return await self._request(f"/cards/{set_code.lower()}/{collector_number}")

    async def search_cards(self, query: str, *, unique: str = "prints") -> AsyncIterator[dict[str, Any]]:
        """
        Iterate every card matching a Scryfall search query across pages.
        """
        endpoint: Optional[str] = "/cards/search"
        params: Optional[dict] = {"q": query, "unique": unique, "order": "released"}

        while endpoint:
            data = await self._request(endpoint, params=params)
            if not data:
                return
            for card in data.get("data", []):
                yield card

            if data.get("has_more") and data.get("next_page"):
                # next_page is absolute and already carries the query
                endpoint = data["next_page"].replace(self.base_url, "")
                params = None
            else:
                endpoint = None
