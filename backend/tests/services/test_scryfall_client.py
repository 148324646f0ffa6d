"""Tests for the Scryfall API client."""
import httpx
import pytest

from mtg_catalog.core.circuit_breaker import CircuitBreaker, CircuitState
from mtg_catalog.core.exceptions import UpstreamUnavailable
from mtg_catalog.services.ingestion.scryfall import ScryfallClient

BASE_URL = "https://api.scryfall.test"


def make_client(handler, **kwargs) -> ScryfallClient:
    kwargs.setdefault("breaker", CircuitBreaker("scryfall-test"))
    return ScryfallClient(
        BASE_URL,
        rate_limit_seconds=0,
        max_retries=kwargs.pop("max_retries", 2),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestScryfallClient:
    @pytest.mark.asyncio
    async def test_get_card(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "abc", "name": "Lightning Bolt"})

        async with make_client(handler) as client:
            card = await client.get_card("abc")

        assert card["name"] == "Lightning Bolt"
        assert seen[0].url.path == "/cards/abc"
        assert seen[0].headers["User-Agent"].startswith("MTGCatalogEngine")

    @pytest.mark.asyncio
    async def test_get_card_by_set_number_lowercases_set(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"id": "abc"})

        async with make_client(handler) as client:
            await client.get_card_by_set_number("M10", "146")

        assert paths == ["/cards/m10/146"]

    @pytest.mark.asyncio
    async def test_not_found_returns_none(self):
        async with make_client(lambda request: httpx.Response(404, json={})) as client:
            assert await client.get_card("missing") is None

    @pytest.mark.asyncio
    async def test_retries_after_rate_limit(self):
        responses = [
            httpx.Response(429, headers={"Retry-After": "0"}),
            httpx.Response(200, json={"id": "abc"}),
        ]

        async with make_client(lambda request: responses.pop(0)) as client:
            card = await client.get_card("abc")

        assert card == {"id": "abc"}
        assert responses == []

    @pytest.mark.asyncio
    async def test_rate_limit_retries_exhausted(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(429, headers={"Retry-After": "0"})

        async with make_client(handler, max_retries=2) as client:
            with pytest.raises(UpstreamUnavailable):
                await client.get_card("abc")

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_server_error_is_upstream_unavailable(self):
        async with make_client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(UpstreamUnavailable):
                await client.get_card("abc")

    @pytest.mark.asyncio
    async def test_client_error_is_upstream_unavailable(self):
        async with make_client(lambda request: httpx.Response(400, json={})) as client:
            with pytest.raises(UpstreamUnavailable) as exc_info:
                await client.get_card("abc")

        assert exc_info.value.context["status"] == 400

    @pytest.mark.asyncio
    async def test_transport_error_is_upstream_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(UpstreamUnavailable):
                await client.get_card("abc")

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        breaker = CircuitBreaker("scryfall-test", failure_threshold=2, recovery_timeout=60)
        async with make_client(handler, breaker=breaker) as client:
            for _ in range(2):
                with pytest.raises(UpstreamUnavailable):
                    await client.get_card("abc")
            assert breaker.state == CircuitState.OPEN

            with pytest.raises(UpstreamUnavailable):
                await client.get_card("abc")

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_search_follows_pages(self):
        requests = []

        def handler(request):
            requests.append(request)
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json={"data": [{"id": "c"}], "has_more": False})
            return httpx.Response(200, json={
                "data": [{"id": "a"}, {"id": "b"}],
                "has_more": True,
                "next_page": f"{BASE_URL}/cards/search?q=bolt&page=2",
            })

        async with make_client(handler) as client:
            cards = [card async for card in client.search_cards("bolt")]

        assert [c["id"] for c in cards] == ["a", "b", "c"]
        assert requests[0].url.params["q"] == "bolt"
        assert requests[0].url.params["unique"] == "prints"
        assert requests[1].url.path == "/cards/search"

    @pytest.mark.asyncio
    async def test_search_with_no_results(self):
        async with make_client(lambda request: httpx.Response(404, json={})) as client:
            cards = [card async for card in client.search_cards("nothing")]

        assert cards == []
