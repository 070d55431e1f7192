"""
Cooperative, tick-driven drawing of large item sets.

Redrawing thousands of marks is split into resumable DrawTasks. A
DrawScheduler advances each pending task by a small batch per tick so the
caller's event loop stays responsive. Starting a new task for a target
cancels whatever was still drawing on it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Hashable, List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 25
DEFAULT_INTERVAL = 0.016


class DrawingIndicator(Protocol):
    """Shown while a target has pending draw work ("Drawing...")."""

    def show(self, target: Hashable) -> None: ...

    def hide(self, target: Hashable) -> None: ...


class DrawTask:
    """
    Resumable unit of draw work over a fixed queue of items.

    draw_item is called as draw_item(position, item) where position is the
    item's place in the queue (the value pick-index colours are built from).
    """

    def __init__(self, items: Sequence[Any], draw_item: Callable[[int, Any], None]):
        self.items = list(items)
        self.draw_item = draw_item
        self.progress = 0
        self.cancelled = False

    @property
    def done(self) -> bool:
        return self.cancelled or self.progress >= len(self.items)

    def advance(self, batch_size: int = DEFAULT_BATCH_SIZE) -> bool:
        """Draw up to batch_size more items. Returns True once finished."""
        end = min(len(self.items), self.progress + batch_size)
        while not self.cancelled and self.progress < end:
            self.draw_item(self.progress, self.items[self.progress])
            self.progress += 1
        return self.done

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        return f"DrawTask(progress={self.progress}/{len(self.items)}, cancelled={self.cancelled})"


class DrawScheduler:
    """
    Drives DrawTasks, at most one per target, batch_size items per tick.
    """

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        interval: float = DEFAULT_INTERVAL,
        indicator: Optional[DrawingIndicator] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.batch_size = batch_size
        self.interval = interval
        self.indicator = indicator
        self._tasks: Dict[Hashable, DrawTask] = {}

    def start(self, target: Hashable, task: DrawTask) -> DrawTask:
        previous = self._tasks.pop(target, None)
        if previous is not None and not previous.done:
            previous.cancel()
            logger.debug("Superseded draw task", extra={"target": str(target), "progress": previous.progress})

        self._tasks[target] = task
        if self.indicator is not None:
            self.indicator.show(target)
        return task

    def cancel(self, target: Hashable) -> None:
        task = self._tasks.pop(target, None)
        if task is not None:
            task.cancel()
            if self.indicator is not None:
                self.indicator.hide(target)

    def pending(self, target: Hashable) -> Optional[DrawTask]:
        return self._tasks.get(target)

    @property
    def is_idle(self) -> bool:
        return not self._tasks

    def tick(self) -> None:
        """Advance every pending task by one batch."""
        finished: List[Hashable] = []
        for target, task in list(self._tasks.items()):
            if task.advance(self.batch_size):
                finished.append(target)

        for target in finished:
            # a draw_item callback may have started a new task for the target
            if self._tasks.get(target) is not None and self._tasks[target].done:
                del self._tasks[target]
                if self.indicator is not None:
                    self.indicator.hide(target)

    def run_until_idle(self, max_ticks: Optional[int] = None) -> int:
        """Tick synchronously until nothing is pending; returns ticks used."""
        ticks = 0
        while not self.is_idle and (max_ticks is None or ticks < max_ticks):
            self.tick()
            ticks += 1
        return ticks

    async def run(self, stop_when_idle: bool = True) -> None:
        """Tick every `interval` seconds on the running asyncio loop."""
        while True:
            if self._tasks:
                self.tick()
            elif stop_when_idle:
                return
            await asyncio.sleep(self.interval)
