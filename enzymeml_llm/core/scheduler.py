"""
Concurrency Scheduler for enzymeml-llm

This module runs a batch of tool calls concurrently under a concurrency
cap and an optional windowed rate limit. The batch settles all of its
calls before returning; results keep the order of the input calls.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from ..config.settings import ToolChainSettings
from ..schemas.tools import ToolCall, ToolErrorType, ToolResult


logger = logging.getLogger(__name__)

ExecuteFn = Callable[[ToolCall], Awaitable[ToolResult]]


@dataclass(frozen=True)
class RateLimit:
    """Admit at most ``max_tasks`` calls per ``interval_seconds`` window."""
    max_tasks: int
    interval_seconds: float = 1.0
    carry_over: bool = False

    def __post_init__(self):
        if self.max_tasks < 1:
            raise ValueError("max_tasks must be at least 1")
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")


@dataclass
class BatchResult:
    """Result of running one batch of tool calls."""
    results: list[ToolResult]
    total_duration_ms: int

    @property
    def count(self) -> int:
        return len(self.results)

    @property
    def all_successful(self) -> bool:
        """Check if all tool calls succeeded."""
        return all(r.success for r in self.results)

    @property
    def failed_results(self) -> list[ToolResult]:
        """Get list of failed tool calls."""
        return [r for r in self.results if not r.success]

    def get_result(self, call_id: str) -> ToolResult | None:
        """Get result for a specific call ID."""
        for r in self.results:
            if r.call_id == call_id:
                return r
        return None


class WindowGate:
    """
    Windowed admission control.

    Each window admits ``max_tasks`` calls. With carry-over enabled the
    admissions left unused in one window are added to the next, up to one
    extra window's worth.
    """

    def __init__(
        self,
        limit: RateLimit,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.limit = limit
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._window_start: float | None = None
        self._allowance = limit.max_tasks
        self._used = 0

    def _roll(self, now: float) -> None:
        interval = self.limit.interval_seconds
        elapsed = now - self._window_start
        if elapsed < interval:
            return

        windows = int(elapsed // interval)
        allowance = self.limit.max_tasks
        if self.limit.carry_over:
            unused = max(0, self._allowance - self._used) + (windows - 1) * self.limit.max_tasks
            allowance += min(unused, self.limit.max_tasks)

        self._window_start += windows * interval
        self._allowance = allowance
        self._used = 0

    async def acquire(self) -> None:
        """Wait until the current window admits one more call."""
        async with self._lock:
            while True:
                now = self._clock()
                if self._window_start is None:
                    self._window_start = now
                self._roll(now)
                if self._used < self._allowance:
                    self._used += 1
                    return
                wait = self._window_start + self.limit.interval_seconds - now
                logger.debug("Rate limit reached, waiting %.3fs", wait)
                await self._sleep(max(wait, 0.0))


class ConcurrencyScheduler:
    """
    Runs tool calls concurrently.

    At most ``max_concurrent`` calls are in flight at any moment. A failing
    call never cancels its siblings; the batch always settles completely.
    """

    def __init__(
        self,
        max_concurrent: int = 2,
        rate_limit: RateLimit | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the scheduler.

        Args:
            max_concurrent: Maximum number of concurrent executions
            rate_limit: Optional windowed admission limit
            clock: Monotonic clock used by the rate limiter
            sleep: Awaitable sleep used by the rate limiter
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self.rate_limit = rate_limit
        # Shared by every batch, so one window spans all rounds of a chain
        self._gate = WindowGate(rate_limit, clock, sleep) if rate_limit else None

    @classmethod
    def from_settings(cls, settings: ToolChainSettings) -> "ConcurrencyScheduler":
        rate_limit = None
        if settings.rate_limited:
            rate_limit = RateLimit(
                max_tasks=settings.rate_limit_max_tasks,
                interval_seconds=settings.rate_limit_interval_seconds,
                carry_over=settings.rate_limit_carry_over,
            )
        return cls(max_concurrent=settings.max_concurrency, rate_limit=rate_limit)

    async def run(self, calls: list[ToolCall], execute: ExecuteFn) -> BatchResult:
        """
        Execute all calls and wait for every one of them to settle.

        Args:
            calls: The calls of one planning round
            execute: Async function executing a single call

        Returns:
            BatchResult with one ToolResult per call, in input order
        """
        if not calls:
            return BatchResult(results=[], total_duration_ms=0)

        started = time.monotonic()
        semaphore = asyncio.Semaphore(self.max_concurrent)
        gate = self._gate

        async def execute_with_semaphore(call: ToolCall) -> ToolResult:
            async with semaphore:
                if gate is not None:
                    await gate.acquire()
                return await execute(call)

        tasks = [execute_with_semaphore(call) for call in calls]
        settled = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[ToolResult] = []
        for call, outcome in zip(calls, settled):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error(
                    "Tool %s raised outside the executor: %s",
                    call.name, outcome,
                    extra={"call_id": call.call_id, "tool_name": call.name},
                )
                results.append(ToolResult.failure(
                    call,
                    ToolErrorType.EXECUTION_ERROR,
                    f"{type(outcome).__name__}: {outcome}",
                ))
            else:
                results.append(outcome)

        total_duration_ms = int((time.monotonic() - started) * 1000)
        return BatchResult(results=results, total_duration_ms=total_duration_ms)
