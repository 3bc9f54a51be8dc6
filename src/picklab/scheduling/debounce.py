"""Cancellable debounce timer for coalescing bursts of writes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class DebouncedTask:
    """Run ``action`` once ``delay`` seconds have passed since the last ``schedule()``.

    ``action`` is called at the moment the timer fires (or ``fire_now()`` is
    called), so whatever it captures reflects that moment. Only the timer is
    cancellable. The awaitable it returns runs as its own task and is never
    cancelled by a later ``schedule()`` or ``cancel()``.
    """

    def __init__(
        self,
        delay: float,
        action: Callable[[], Awaitable[None]],
        *,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self.delay = delay
        self.action = action
        self._sleep = sleep_fn or asyncio.sleep
        self._timer: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def schedule(self) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._wait_then_fire())

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def fire_now(self) -> asyncio.Task[None]:
        """Skip the quiet period: drop the timer and launch the action."""

        self.cancel()
        return self._launch()

    async def _wait_then_fire(self) -> None:
        await self._sleep(self.delay)
        self._timer = None
        self._launch()

    def _launch(self) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._run_action(self.action()))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _run_action(self, pending: Awaitable[None]) -> None:
        try:
            await pending
        except Exception:
            logger.exception("Debounced action failed")

    async def drain(self) -> None:
        """Wait for a pending timer and every in-flight action to finish."""

        timer = self._timer
        if timer is not None:
            await asyncio.gather(timer, return_exceptions=True)
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
