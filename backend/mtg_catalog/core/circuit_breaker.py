"""
Circuit breaker for upstream calls (catalog sync and lookups).

Fails fast with ``UpstreamUnavailable`` while an upstream is unhealthy and
lets a few trial requests through after a recovery timeout.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import structlog

from mtg_catalog.core.exceptions import UpstreamUnavailable

logger = structlog.get_logger()


class CircuitState(Enum):
    CLOSED = "closed"      # Normal operation
    OPEN = "open"          # Failing fast
    HALF_OPEN = "half_open"  # Testing recovery


@dataclass
class CircuitBreaker:
    """
    Usage:
        breaker = get_circuit_breaker("scryfall")

        async with breaker:
            result = await client.get(...)
    """
    name: str
    failure_threshold: int = 5       # Failures before opening
    recovery_timeout: float = 30.0   # Seconds before trying half-open
    half_open_requests: int = 1      # Successful requests to close

    state: CircuitState = field(default=CircuitState.CLOSED)
    failure_count: int = field(default=0)
    success_count: int = field(default=0)
    last_failure_time: Optional[float] = field(default=None)

    async def __aenter__(self):
        if self.state == CircuitState.OPEN:
            if self._should_attempt_recovery():
                self.state = CircuitState.HALF_OPEN
                self.success_count = 0
                logger.info("Circuit half-open", circuit=self.name)
            else:
                raise UpstreamUnavailable(
                    f"{self.name} is unavailable; retry after {self._time_until_recovery():.1f}s",
                    circuit=self.name,
                )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self._record_failure()
        else:
            self._record_success()
        return False

    def _should_attempt_recovery(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.monotonic() - self.last_failure_time >= self.recovery_timeout

    def _time_until_recovery(self) -> float:
        if self.last_failure_time is None:
            return 0.0
        return max(0.0, self.recovery_timeout - (time.monotonic() - self.last_failure_time))

    def _record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.monotonic()

        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.OPEN
            logger.warning("Circuit reopened after half-open failure", circuit=self.name)
        elif self.failure_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            logger.warning("Circuit opened", circuit=self.name, failures=self.failure_count)

    def _record_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.half_open_requests:
                self.state = CircuitState.CLOSED
                self.failure_count = 0
                logger.info("Circuit closed after recovery", circuit=self.name)
        else:
            self.failure_count = 0

    def reset(self) -> None:
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time = None


_breakers: dict[str, CircuitBreaker] = {}


def get_circuit_breaker(name: str, **kwargs) -> CircuitBreaker:
    """Get or create a circuit breaker by name."""
    if name not in _breakers:
        _breakers[name] = CircuitBreaker(name=name, **kwargs)
    return _breakers[name]


def clear_all_breakers() -> None:
    """Clear the registry. Useful for testing."""
    _breakers.clear()
