"""
comingsoon/page.py

The coming-soon page: owns the launch target, the countdown ticker, the
subscription client and the form.

Lifecycle:
    1. __init__() - Construct page (fast, no I/O)
    2. mount() - Start the ticker and fire the subscriber count read
    3. [view renders, user edits and submits]
    4. unmount() - Stop the ticker; late results are dropped
    5. close() - Wait for background work, release the HTTP client
"""

import asyncio
import logging
from typing import Callable, Optional, Set

import httpx

from .config import SiteConfig
from .countdown import CountdownTicker, LaunchTarget, TimeRemaining, now_ms
from .subscription import SubscriptionClient, SubscriptionForm


class ComingSoonPage:
    """
    Everything the coming-soon screen shows, independent of rendering.

    Attributes:
        target: Launch moment being counted down to
        ticker: Once-per-interval countdown refresher
        form: Email capture state machine
        mounted: Whether mount() has run without a matching unmount()
    """

    def __init__(
        self,
        target: LaunchTarget,
        client: SubscriptionClient,
        tick_interval: float = 1.0,
        clock: Callable[[], int] = now_ms,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.target = target
        self.client = client
        self.on_change = on_change
        self.ticker = CountdownTicker(
            target.target_ms,
            interval=tick_interval,
            on_tick=self._on_tick,
            on_expire=self._on_expire,
            clock=clock,
        )
        self.form = SubscriptionForm(client, on_change=self._changed)
        self.mounted = False
        self._tasks: Set[asyncio.Task] = set()
        self.logger = logging.getLogger(f"{__name__}.ComingSoonPage")

    @classmethod
    def from_config(
        cls,
        config: SiteConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs,
    ) -> "ComingSoonPage":
        """
        Build a page from resolved settings.

        Raises:
            ValueError: If the configured launch date cannot be parsed.
        """
        target = LaunchTarget.resolve(
            config.launch_date,
            default_days=config.countdown_days,
        )
        client = SubscriptionClient(
            config.backend_url,
            timeout=config.timeout,
            source=config.source,
            transport=transport,
        )
        return cls(target, client, tick_interval=config.tick_interval, **kwargs)

    @property
    def remaining(self) -> TimeRemaining:
        return self.ticker.current

    async def mount(self) -> None:
        """Start the countdown and request the subscriber count."""
        if self.mounted:
            self.logger.warning("Page already mounted")
            return

        self.mounted = True
        self.form.attach()
        await self.ticker.start()
        self._spawn(self.form.load_subscriber_count())
        self.logger.info(
            f"Mounted; launch in {self.target.describe()} "
            f"(backend: {self.client.base_url})"
        )

    async def unmount(self) -> None:
        """Stop the ticker and drop results of requests still in flight."""
        if not self.mounted:
            return

        self.mounted = False
        await self.ticker.stop()
        self.form.detach()
        self.logger.info("Unmounted")

    async def close(self) -> None:
        """Wait for outstanding requests, then close the HTTP client."""
        await self.unmount()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.client.close()

    async def __aenter__(self) -> "ComingSoonPage":
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def request_submit(self) -> Optional[asyncio.Task]:
        """
        Submit the form in the background, as a button press would.

        Ignored while the button is disabled or the page is not mounted.

        Returns:
            The submission task, or None if the press was ignored.
        """
        if not self.mounted or not self.form.submit_enabled:
            return None
        return self._spawn(self.form.submit())

    async def wait_idle(self) -> None:
        """Wait until no background request is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(
                "Background task failed", exc_info=task.exception()
            )

    def _on_tick(self, remaining: TimeRemaining) -> None:
        self._changed()

    def _on_expire(self) -> None:
        self.logger.info("Launch time reached")
        self._changed()

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()
