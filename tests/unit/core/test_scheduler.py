"""Tests for the global request scheduler."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from paperscout.config.settings import HttpSettings
from paperscout.core.exceptions import ConfigurationError, TransientNetworkError
from paperscout.core.scheduler import RequestScheduler, RetryPolicy, as_transient


def status_error(status: int, url: str = "https://api.example.org/items") -> httpx.HTTPStatusError:
    request = httpx.Request("GET", url)
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


# ── Tests: RetryPolicy ──


class TestRetryPolicy:
    def test_backoff_doubles_from_base(self) -> None:
        policy = RetryPolicy(base_delay_ms=1000, cap_delay_ms=30000, jitter_ms=0)
        assert policy.backoff_ms(1) == 0.0
        assert policy.backoff_ms(2) == 1000
        assert policy.backoff_ms(3) == 2000
        assert policy.backoff_ms(4) == 4000

    def test_backoff_is_capped(self) -> None:
        policy = RetryPolicy(base_delay_ms=1000, cap_delay_ms=5000, jitter_ms=0)
        assert policy.backoff_ms(10) == 5000

    def test_delay_includes_bounded_jitter(self) -> None:
        policy = RetryPolicy(base_delay_ms=1000, cap_delay_ms=30000, jitter_ms=250)
        for _ in range(50):
            delay = policy.delay_for(2)
            assert 1.0 <= delay <= 1.25

    def test_from_retry_count(self) -> None:
        policy = RetryPolicy.from_retry_count(5)
        assert policy.max_attempts == 6

    def test_zero_retries_means_single_attempt(self) -> None:
        assert RetryPolicy.from_retry_count(0).max_attempts == 1


# ── Tests: Failure classification ──


class TestAsTransient:
    @pytest.mark.parametrize("status", [408, 413, 429, 500, 502, 503, 504, 520, 521, 522, 524])
    def test_retryable_statuses(self, status: int) -> None:
        error = as_transient(status_error(status))
        assert isinstance(error, TransientNetworkError)
        assert error.status_code == status

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 501])
    def test_non_retryable_statuses(self, status: int) -> None:
        assert as_transient(status_error(status)) is None

    def test_timeout_is_transient(self) -> None:
        assert isinstance(as_transient(TimeoutError()), TransientNetworkError)

    def test_httpx_timeout_is_transient(self) -> None:
        request = httpx.Request("GET", "https://slow.example.org/")
        error = as_transient(httpx.ReadTimeout("slow", request=request))
        assert isinstance(error, TransientNetworkError)
        assert error.url == "https://slow.example.org/"

    def test_other_errors_are_not_transient(self) -> None:
        assert as_transient(ValueError("bad")) is None


# ── Tests: Construction ──


class TestSchedulerConstruction:
    def test_defaults(self) -> None:
        scheduler = RequestScheduler()
        assert scheduler.max_concurrent == 2
        assert scheduler.min_interval == 1.0
        assert scheduler.timeout == 30.0
        assert scheduler.retry_policy.max_attempts == 6

    def test_from_settings(self) -> None:
        settings = HttpSettings(max_concurrent=4, min_interval_ms=250, timeout_ms=1000, retry_count=2)
        scheduler = RequestScheduler.from_settings(settings)
        assert scheduler.max_concurrent == 4
        assert scheduler.min_interval == 0.25
        assert scheduler.timeout == 1.0
        assert scheduler.retry_policy.max_attempts == 3

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_concurrent": 0}, {"min_interval_ms": -1}, {"timeout_ms": 0}],
    )
    def test_invalid_values_raise(self, kwargs: dict[str, int]) -> None:
        with pytest.raises(ConfigurationError):
            RequestScheduler(**kwargs)


# ── Tests: Throttling ──


class TestThrottling:
    @pytest.mark.asyncio
    async def test_concurrency_ceiling(self, scheduler: RequestScheduler) -> None:
        in_flight = 0
        peak = 0

        async def task() -> None:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1

        await asyncio.gather(*(scheduler.execute(task) for _ in range(8)))
        assert peak == 2
        assert scheduler.active == 0
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_start_times_are_spaced(self) -> None:
        clock = FakeClock()
        scheduler = RequestScheduler(max_concurrent=3, min_interval_ms=1000, sleep=clock.sleep, clock=clock)
        starts: list[float] = []

        for _ in range(3):
            await scheduler.execute(AsyncMock(side_effect=lambda: starts.append(clock())))
        assert starts == [0.0, 1.0, 2.0]

    @pytest.mark.asyncio
    async def test_concurrent_starts_share_one_interval(self) -> None:
        clock = FakeClock()
        scheduler = RequestScheduler(max_concurrent=3, min_interval_ms=1000, sleep=clock.sleep, clock=clock)

        await asyncio.gather(*(scheduler.execute(AsyncMock(return_value=None)) for _ in range(4)))
        assert clock.sleeps == [1.0, 1.0, 1.0]

    @pytest.mark.asyncio
    async def test_no_wait_when_interval_already_elapsed(self) -> None:
        clock = FakeClock()
        scheduler = RequestScheduler(min_interval_ms=1000, sleep=clock.sleep, clock=clock)

        await scheduler.execute(AsyncMock(return_value=None))
        clock.now += 5.0
        await scheduler.execute(AsyncMock(return_value=None))
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_admission_is_fifo(self) -> None:
        scheduler = RequestScheduler(max_concurrent=1, min_interval_ms=0)
        order: list[int] = []

        def make(label: int):
            async def task() -> None:
                order.append(label)
                await asyncio.sleep(0)

            return task

        await asyncio.gather(*(scheduler.execute(make(i)) for i in range(6)))
        assert order == [0, 1, 2, 3, 4, 5]


# ── Tests: Retry ──


class TestRetry:
    @pytest.mark.asyncio
    async def test_returns_result(self, scheduler: RequestScheduler) -> None:
        assert await scheduler.execute(AsyncMock(return_value="ok")) == "ok"

    @pytest.mark.asyncio
    async def test_retries_transient_then_succeeds(self, scheduler: RequestScheduler, fake_sleep: AsyncMock) -> None:
        task = AsyncMock(side_effect=[status_error(429), status_error(503), "ok"])
        assert await scheduler.execute(task) == "ok"
        assert task.await_count == 3
        assert [c.args[0] for c in fake_sleep.await_args_list] == [0.01, 0.02]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, scheduler: RequestScheduler) -> None:
        task = AsyncMock(side_effect=status_error(503))
        with pytest.raises(TransientNetworkError) as exc_info:
            await scheduler.execute(task)

        assert task.await_count == 3
        assert exc_info.value.attempts == 3
        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_zero_retries_runs_once(self, fake_sleep: AsyncMock) -> None:
        scheduler = RequestScheduler(
            min_interval_ms=0,
            retry_policy=RetryPolicy.from_retry_count(0),
            sleep=fake_sleep,
        )
        task = AsyncMock(side_effect=status_error(500))
        with pytest.raises(TransientNetworkError):
            await scheduler.execute(task)
        assert task.await_count == 1
        fake_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_transient_status_is_not_retried(self, scheduler: RequestScheduler) -> None:
        task = AsyncMock(side_effect=status_error(404))
        with pytest.raises(httpx.HTTPStatusError):
            await scheduler.execute(task)
        assert task.await_count == 1

    @pytest.mark.asyncio
    async def test_other_errors_propagate_unchanged(self, scheduler: RequestScheduler) -> None:
        task = AsyncMock(side_effect=ValueError("malformed"))
        with pytest.raises(ValueError, match="malformed"):
            await scheduler.execute(task)
        assert task.await_count == 1

    @pytest.mark.asyncio
    async def test_timeout_counts_as_transient(self, fake_sleep: AsyncMock) -> None:
        scheduler = RequestScheduler(
            min_interval_ms=0,
            timeout_ms=10,
            retry_policy=RetryPolicy(max_attempts=2, jitter_ms=0),
            sleep=fake_sleep,
        )
        calls = 0

        async def slow() -> None:
            nonlocal calls
            calls += 1
            await asyncio.sleep(1)

        with pytest.raises(TransientNetworkError, match="timed out"):
            await scheduler.execute(slow)
        assert calls == 2
        assert scheduler.active == 0
