"""Asyncio driver: applies incoming reports and runs the fixed-interval tick."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from planetracker.services.program import ProgramState

logger = logging.getLogger("planetracker.services.runtime")

DEFAULT_TICK_INTERVAL_S = 0.25


class TrackerRuntime:
    """Runs the consumer side of ``ProgramState`` on the event loop.

    The receiver thread only wakes the loop; all state changes happen in
    tasks owned here, so the loop never waits on the network.
    """

    def __init__(
        self, program: ProgramState, *, tick_interval: float = DEFAULT_TICK_INTERVAL_S
    ) -> None:
        self.program = program
        self.tick_interval = tick_interval
        self._tasks: list[asyncio.Task] = []
        self._wakeup: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        if self.running:
            return
        loop = asyncio.get_running_loop()
        wakeup = asyncio.Event()
        self._wakeup = wakeup

        def notify() -> None:
            try:
                loop.call_soon_threadsafe(wakeup.set)
            except RuntimeError:
                # Loop already closed during shutdown; the report stays queued.
                logger.debug("Dropped wake-up for closed event loop")

        self.program.channel.bind(notify)
        self._tasks = [
            asyncio.create_task(self._consume(wakeup), name="tracker-consumer"),
            asyncio.create_task(self._tick_loop(), name="tracker-tick"),
        ]
        logger.info("Tracker runtime started (tick every %.3f s)", self.tick_interval)

    async def stop(self) -> None:
        self.program.channel.bind(None)
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("Tracker runtime stopped")

    async def _consume(self, wakeup: asyncio.Event) -> None:
        while True:
            await wakeup.wait()
            wakeup.clear()
            self.program.process_pending()

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            try:
                self.program.process_pending()
                self.program.tick()
            except Exception:  # pragma: no cover - keep ticking after a bad tick
                logger.exception("Tracker tick failed")


__all__ = ["DEFAULT_TICK_INTERVAL_S", "TrackerRuntime"]
