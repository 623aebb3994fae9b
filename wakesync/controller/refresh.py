"""Independently paced repeating refresh cycles under one supervisor."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

LOGGER = logging.getLogger("wakesync.refresh")

RefreshAction = Callable[[], Awaitable[object]]

CLOCK_CYCLE = "clock"
MODE_CYCLE = "mode"
HISTORY_CYCLE = "history"


@dataclass(slots=True)
class RefreshCycle:
    name: str
    period: float
    action: RefreshAction
    runs: int = 0
    task: asyncio.Task | None = field(default=None, repr=False)


class RefreshOrchestrator:
    """Runs named cycles; (re)starting a name cancels its previous task first."""

    def __init__(self) -> None:
        self._cycles: dict[str, RefreshCycle] = {}

    @property
    def running(self) -> dict[str, asyncio.Task]:
        return {name: cycle.task for name, cycle in self._cycles.items() if cycle.task and not cycle.task.done()}

    def cycle(self, name: str) -> RefreshCycle | None:
        return self._cycles.get(name)

    def start(self, name: str, period: float, action: RefreshAction, *, immediate: bool = True) -> RefreshCycle:
        if period <= 0:
            raise ValueError("Refresh period must be positive")
        self.stop(name)
        cycle = RefreshCycle(name=name, period=period, action=action)
        cycle.task = asyncio.get_running_loop().create_task(
            self._run_cycle(cycle, immediate), name=f"wakesync-refresh-{name}"
        )
        self._cycles[name] = cycle
        LOGGER.debug("Started %s refresh every %.1fs", name, period)
        return cycle

    def stop(self, name: str) -> None:
        cycle = self._cycles.pop(name, None)
        if cycle and cycle.task:
            cycle.task.cancel()

    async def stop_all(self) -> None:
        tasks = [cycle.task for cycle in self._cycles.values() if cycle.task]
        self._cycles.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def trigger(self, name: str) -> bool:
        """Run a cycle's action once, outside its schedule."""
        cycle = self._cycles.get(name)
        if cycle is None:
            return False
        await self._run_once(cycle)
        return True

    async def _run_cycle(self, cycle: RefreshCycle, immediate: bool) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + (0.0 if immediate else cycle.period)
        while True:
            delay = next_at - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            await self._run_once(cycle)
            next_at += cycle.period
            now = loop.time()
            if next_at <= now:
                # Skip periods missed while the action was slow rather than bursting.
                skipped = int((now - next_at) // cycle.period) + 1
                next_at += skipped * cycle.period

    async def _run_once(self, cycle: RefreshCycle) -> None:
        cycle.runs += 1
        try:
            await cycle.action()
        except asyncio.CancelledError:
            raise
        except Exception:  # pylint: disable=broad-except
            LOGGER.exception("%s refresh failed; continuing", cycle.name)
