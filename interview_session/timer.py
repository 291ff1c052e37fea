"""Per-question ticking clock owned by the session controller."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional


class QuestionTimer:
    """Cancellable periodic task calling ``on_tick`` once per ``interval`` seconds.

    ``stop`` cancels the task outright; a later ``start`` begins a fresh task.
    Must be started from inside a running event loop.
    """

    def __init__(
        self,
        on_tick: Callable[[], None],
        interval: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._on_tick = on_tick
        self._interval = interval
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval)
            self._on_tick()


def format_time(seconds: int) -> str:
    """Render elapsed seconds as ``MM:SS``."""

    minutes, remaining = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remaining:02d}"


__all__ = ["QuestionTimer", "format_time"]
