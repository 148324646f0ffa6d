"""Tests for circuit breaker pattern implementation."""
from unittest.mock import patch

import pytest

from mtg_catalog.core.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
    clear_all_breakers,
    get_circuit_breaker,
)
from mtg_catalog.core.exceptions import UpstreamUnavailable


async def _fail(breaker: CircuitBreaker, times: int) -> None:
    for _ in range(times):
        with pytest.raises(ValueError):
            async with breaker:
                raise ValueError("Test error")


class TestCircuitBreaker:
    """Tests for CircuitBreaker class."""

    @pytest.mark.asyncio
    async def test_closed_state_allows_requests(self):
        breaker = CircuitBreaker(name="test", failure_threshold=3)

        async with breaker:
            pass

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_circuit_opens_after_threshold(self):
        breaker = CircuitBreaker(name="test", failure_threshold=3)
        await _fail(breaker, 3)

        assert breaker.failure_count == 3
        assert breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self):
        breaker = CircuitBreaker(name="test", failure_threshold=2, recovery_timeout=60.0)
        await _fail(breaker, 2)

        with pytest.raises(UpstreamUnavailable):
            async with breaker:
                pytest.fail("should not run")

    @pytest.mark.asyncio
    async def test_success_resets_failure_count(self):
        breaker = CircuitBreaker(name="test", failure_threshold=3)
        await _fail(breaker, 2)

        async with breaker:
            pass

        assert breaker.failure_count == 0
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_success_closes_circuit(self):
        breaker = CircuitBreaker(name="test", failure_threshold=1, recovery_timeout=10.0)
        with patch("mtg_catalog.core.circuit_breaker.time.monotonic", return_value=100.0):
            await _fail(breaker, 1)
        assert breaker.state == CircuitState.OPEN

        with patch("mtg_catalog.core.circuit_breaker.time.monotonic", return_value=111.0):
            async with breaker:
                assert breaker.state == CircuitState.HALF_OPEN

        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_failure_reopens_circuit(self):
        breaker = CircuitBreaker(name="test", failure_threshold=1, recovery_timeout=10.0)
        with patch("mtg_catalog.core.circuit_breaker.time.monotonic", return_value=100.0):
            await _fail(breaker, 1)

        with patch("mtg_catalog.core.circuit_breaker.time.monotonic", return_value=111.0):
            await _fail(breaker, 1)

        assert breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_reset(self):
        breaker = CircuitBreaker(name="test", failure_threshold=1)
        await _fail(breaker, 1)
        breaker.reset()
        assert breaker.state == CircuitState.CLOSED
        assert breaker.last_failure_time is None


class TestRegistry:
    def test_same_name_same_breaker(self):
        assert get_circuit_breaker("scryfall") is get_circuit_breaker("scryfall")

    def test_clear(self):
        first = get_circuit_breaker("scryfall")
        clear_all_breakers()
        assert get_circuit_breaker("scryfall") is not first
