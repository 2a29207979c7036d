"""Request scheduler — The single throttling and retry gate for outbound calls.

Every network call issued by any adapter passes through one shared
``RequestScheduler``.  The scheduler:

  1. Admits tasks in submission order (FIFO), no priority lanes
  2. Bounds simultaneously in-flight tasks by ``max_concurrent``
  3. Spaces task start times by at least ``min_interval_ms`` (process-wide)
  4. Applies a per-attempt timeout
  5. Retries transient failures with capped exponential backoff and jitter

Budgets are global across all sources, not per source.  Each retry attempt
is re-admitted through the same gate, so retries also respect the
concurrency ceiling and start spacing.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import httpx
from pydantic import BaseModel, Field

from paperscout.core.exceptions import ConfigurationError, TransientNetworkError

if TYPE_CHECKING:
    from paperscout.config.settings import HttpSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 413, 429, 500, 502, 503, 504, 520, 521, 522, 524})


class RetryPolicy(BaseModel):
    """Backoff policy for transient failures.

    Delay before attempt *k* (1-indexed, k > 1) is
    ``min(base_delay_ms * 2**(k-2), cap_delay_ms)`` plus uniform jitter in
    ``[0, jitter_ms]``.
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=6, ge=1, description="Total attempts, including the first")
    base_delay_ms: int = Field(default=1000, ge=0, description="Delay before the second attempt")
    cap_delay_ms: int = Field(default=30000, ge=0, description="Upper bound of the exponential term")
    jitter_ms: int = Field(default=250, ge=0, description="Upper bound of the random jitter term")

    @classmethod
    def from_retry_count(cls, retry_count: int, **kwargs: int) -> RetryPolicy:
        return cls(max_attempts=retry_count + 1, **kwargs)

    def backoff_ms(self, attempt: int) -> float:
        """Deterministic part of the delay before ``attempt`` (no jitter)."""
        if attempt <= 1:
            return 0.0
        return float(min(self.base_delay_ms * 2 ** (attempt - 2), self.cap_delay_ms))

    def delay_for(self, attempt: int, rng: random.Random | None = None) -> float:
        """Total delay in seconds before ``attempt``, jitter included."""
        if attempt <= 1:
            return 0.0
        jitter = (rng or random).uniform(0, self.jitter_ms) if self.jitter_ms else 0.0
        return (self.backoff_ms(attempt) + jitter) / 1000.0


def as_transient(error: BaseException) -> TransientNetworkError | None:
    """Classify ``error``; return a TransientNetworkError if it is retryable."""
    if isinstance(error, TransientNetworkError):
        return error
    if isinstance(error, TimeoutError | httpx.TimeoutException):
        url = str(error.request.url) if isinstance(error, httpx.TimeoutException) and _has_request(error) else None
        return TransientNetworkError("Request timed out", url=url)
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status in RETRYABLE_STATUS_CODES:
            return TransientNetworkError(
                f"HTTP {status} from {error.request.url}",
                status_code=status,
                url=str(error.request.url),
            )
    return None


def _has_request(error: httpx.TimeoutException) -> bool:
    try:
        error.request  # noqa: B018
    except RuntimeError:
        return False
    return True


class RequestScheduler:
    """Global FIFO throttle with per-attempt timeout and retry.

    Args:
        max_concurrent: Ceiling on simultaneously in-flight tasks.
        min_interval_ms: Minimum spacing between task start times.
        timeout_ms: Per-attempt timeout; exceeding it is a transient failure.
        retry_policy: Backoff policy. Defaults to ``RetryPolicy()``.
        sleep: Awaitable sleep function (injectable for tests).
        clock: Monotonic clock in seconds (injectable for tests).
        rng: Random source for jitter.
    """

    def __init__(
        self,
        max_concurrent: int = 2,
        min_interval_ms: int = 1000,
        timeout_ms: int = 30000,
        retry_policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        if max_concurrent < 1:
            raise ConfigurationError(f"max_concurrent must be positive, got {max_concurrent}")
        if min_interval_ms < 0:
            raise ConfigurationError(f"min_interval_ms must be non-negative, got {min_interval_ms}")
        if timeout_ms <= 0:
            raise ConfigurationError(f"timeout_ms must be positive, got {timeout_ms}")

        self.max_concurrent = max_concurrent
        self.min_interval = min_interval_ms / 1000.0
        self.timeout = timeout_ms / 1000.0
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._clock = clock
        self._rng = rng

        self._admission = asyncio.Lock()
        self._slots = asyncio.Semaphore(max_concurrent)
        self._last_start: float | None = None
        self._active = 0
        self._pending = 0

    @classmethod
    def from_settings(cls, settings: HttpSettings, **kwargs: object) -> RequestScheduler:
        """Build a scheduler from the ``http`` settings section."""
        policy = RetryPolicy.from_retry_count(
            settings.retry_count,
            base_delay_ms=settings.backoff_base_ms,
            cap_delay_ms=settings.backoff_cap_ms,
            jitter_ms=settings.backoff_jitter_ms,
        )
        return cls(
            max_concurrent=settings.max_concurrent,
            min_interval_ms=settings.min_interval_ms,
            timeout_ms=settings.timeout_ms,
            retry_policy=policy,
            **kwargs,  # type: ignore[arg-type]
        )

    @property
    def active(self) -> int:
        """Number of tasks currently in flight."""
        return self._active

    @property
    def pending(self) -> int:
        """Number of tasks waiting for admission."""
        return self._pending

    async def execute(self, task: Callable[[], Awaitable[T]], *, label: str | None = None) -> T:
        """Run ``task`` under the global budget, retrying transient failures.

        Args:
            task: Zero-argument callable returning an awaitable (one network call).
                It is invoked once per attempt.
            label: Optional description used in log messages.

        Returns:
            The task's result.

        Raises:
            TransientNetworkError: When every attempt failed transiently.
            Exception: Any non-transient failure, unchanged and unretried.
        """
        policy = self.retry_policy
        attempt = 1
        while True:
            try:
                return await self._run_once(task)
            except Exception as e:
                transient = as_transient(e)
                if transient is None:
                    raise
                if attempt >= policy.max_attempts:
                    raise TransientNetworkError(
                        f"{transient.message} (gave up after {policy.max_attempts} attempts)",
                        status_code=transient.status_code,
                        attempts=policy.max_attempts,
                        url=transient.url,
                    ) from e

            attempt += 1
            delay = policy.delay_for(attempt, self._rng)
            logger.warning(
                "Retrying %s (attempt %d/%d) in %.2fs after: %s",
                label or "request",
                attempt,
                policy.max_attempts,
                delay,
                transient,
            )
            await self._sleep(delay)

    async def _run_once(self, task: Callable[[], Awaitable[T]]) -> T:
        await self._admit()
        self._active += 1
        try:
            return await asyncio.wait_for(task(), timeout=self.timeout)
        finally:
            self._active -= 1
            self._slots.release()

    async def _admit(self) -> None:
        """Wait for FIFO admission, a free slot, and the start-interval gap."""
        self._pending += 1
        try:
            async with self._admission:
                await self._slots.acquire()
                try:
                    if self._last_start is not None and self.min_interval > 0:
                        wait = self._last_start + self.min_interval - self._clock()
                        if wait > 0:
                            await self._sleep(wait)
                    self._last_start = self._clock()
                except BaseException:
                    self._slots.release()
                    raise
        finally:
            self._pending -= 1
