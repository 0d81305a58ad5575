"""
comingsoon/countdown/ticker.py

Asyncio-based countdown ticker.

A single background task recomputes the time remaining once per interval
for as long as the page is mounted. Stopping the ticker cancels the task
and waits for it, so no timer outlives the page.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from .countdown import TimeRemaining, compute_time_remaining, now_ms

TickCallback = Callable[[TimeRemaining], Union[None, Awaitable[None]]]
ExpireCallback = Callable[[], Union[None, Awaitable[None]]]


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class CountdownTicker:
    """
    Recomputes a TimeRemaining on a fixed interval.

    Ticks run inside one task, so they never overlap. Callbacks may be
    plain functions or coroutine functions.

    Args:
        target_ms: Launch moment in epoch milliseconds.
        interval: Seconds between ticks (default: 1).
        on_tick: Called with the new TimeRemaining after every tick.
        on_expire: Called once, on the first tick that reaches zero.
        clock: Returns the current epoch milliseconds.
    """

    def __init__(
        self,
        target_ms: int,
        interval: float = 1.0,
        on_tick: Optional[TickCallback] = None,
        on_expire: Optional[ExpireCallback] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.target_ms = target_ms
        self.interval = interval
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.clock = clock
        self.running = False
        self.tick_count = 0
        self._expired_fired = False
        self._task: Optional[asyncio.Task] = None
        self.current = compute_time_remaining(target_ms, clock())
        self.logger = logging.getLogger(f"{__name__}.CountdownTicker")

    async def start(self) -> None:
        """
        Start the tick loop.

        Creates a background task that refreshes ``current`` every
        ``interval`` seconds until stop() is called.
        """
        if self.running:
            self.logger.warning("Ticker already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._tick_loop())
        self.logger.info(f"Ticker started (interval: {self.interval}s)")

    async def stop(self) -> None:
        """Cancel the tick loop and wait for it to finish."""
        if not self.running:
            return

        self.running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self.logger.info(f"Ticker stopped after {self.tick_count} ticks")

    async def __aenter__(self) -> "CountdownTicker":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    def tick(self) -> TimeRemaining:
        """Recompute ``current`` from the clock and return it."""
        self.current = compute_time_remaining(self.target_ms, self.clock())
        self.tick_count += 1
        return self.current

    async def _tick_loop(self) -> None:
        self.logger.debug("Tick loop started")

        while self.running:
            await asyncio.sleep(self.interval)
            try:
                remaining = self.tick()

                if self.on_tick:
                    await _maybe_await(self.on_tick(remaining))

                if remaining.is_zero and not self._expired_fired:
                    self._expired_fired = True
                    self.logger.info("Countdown reached zero")
                    if self.on_expire:
                        await _maybe_await(self.on_expire())

            except asyncio.CancelledError:
                self.logger.debug("Tick loop cancelled")
                raise
            except Exception as e:
                self.logger.exception(f"Error in tick callback: {e}")

        self.logger.debug("Tick loop ended")
