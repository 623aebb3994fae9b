"""Single-slot, auto-dismissing status messages."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

LOGGER = logging.getLogger("wakesync.notifications")

DEFAULT_DISMISS_SECONDS = 3.0

NoticeListener = Callable[["Notice | None"], None]


@dataclass(frozen=True, slots=True)
class Notice:
    text: str
    persistent: bool = False
    shown_at: float = field(default_factory=time.monotonic, compare=False)


class NotificationSurface:
    """Shows at most one notice; a new notice pre-empts the current one."""

    def __init__(
        self,
        *,
        dismiss_after: float = DEFAULT_DISMISS_SECONDS,
        on_change: NoticeListener | None = None,
    ) -> None:
        self.dismiss_after = dismiss_after
        self._on_change = on_change
        self._current: Notice | None = None
        self._clear_task: asyncio.Task | None = None
        self._failing: set[str] = set()

    @property
    def current(self) -> Notice | None:
        return self._current

    def show(self, text: str, persistent: bool = False) -> Notice:
        self._cancel_clear()
        notice = Notice(text=text, persistent=persistent)
        self._current = notice
        LOGGER.info("Notice: %s", text)
        self._emit()
        if not persistent:
            self._schedule_clear(notice)
        return notice

    def report_failure(self, key: str, text: str) -> Notice | None:
        """Show ``text`` when ``key`` starts failing; repeats stay quiet until it recovers."""
        if key in self._failing:
            LOGGER.debug("%s still failing", key)
            return None
        self._failing.add(key)
        return self.show(text)

    def report_recovery(self, key: str) -> None:
        if key in self._failing:
            LOGGER.info("%s recovered", key)
            self._failing.discard(key)

    def is_failing(self, key: str) -> bool:
        return key in self._failing

    def dismiss(self) -> None:
        self._cancel_clear()
        if self._current is None:
            return
        self._current = None
        self._emit()

    def _schedule_clear(self, notice: Notice) -> None:
        async def _clear_after() -> None:
            try:
                await asyncio.sleep(self.dismiss_after)
            except asyncio.CancelledError:
                return
            if self._current is notice:
                self._clear_task = None
                self._current = None
                self._emit()

        self._clear_task = asyncio.get_running_loop().create_task(_clear_after())

    def _cancel_clear(self) -> None:
        task = self._clear_task
        if task:
            task.cancel()
            self._clear_task = None

    def _emit(self) -> None:
        if not self._on_change:
            return
        try:
            self._on_change(self._current)
        except Exception:  # pylint: disable=broad-except
            LOGGER.exception("Notice listener failed")
