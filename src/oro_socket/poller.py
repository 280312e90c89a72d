"""
Fixed-interval polling primitive.

Every background activity of the supervisor (reconnect attempts, queue
replay, disposal of retired handles) runs through a Poller. A poll is a
single asyncio task that wakes once per interval and, on each tick,
first checks its condition and then either stops or performs one unit
of work:

    tick 1: condition()? -> stop : step()
    tick 2: condition()? -> stop : step()
    ...

The first check happens at the end of the first interval, never at
call time. A list-driven poll over n items therefore completes on tick
n + 1. There is no external abort; a poll ends only when its condition
holds.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .config import DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _call(func: Callable[..., Any], *args: Any) -> Any:
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class Poller:
    """Runs repeat-until-condition loops on a fixed interval.

    Usage::

        poller = Poller(interval=2.0)

        # Condition-driven: retry until the transport reports open
        poller.until(reconnect, lambda: handle.ready_state == ReadyState.OPEN, on_open)

        # List-driven: one item per tick
        poller.over(messages, send, on_sent)
    """

    def __init__(self, interval: float = DEFAULT_POLL_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._interval = interval
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def interval(self) -> float:
        """Seconds between ticks."""
        return self._interval

    @property
    def active(self) -> int:
        """Number of polls still running."""
        return len(self._tasks)

    def until(
        self,
        step: Callable[[], Any],
        condition: Callable[[], bool],
        on_complete: Callable[[], Any] | None = None,
        *,
        wake: asyncio.Event | None = None,
    ) -> asyncio.Task[None]:
        """Run ``step`` once per tick until ``condition`` is true.

        Args:
            step: Unit of work, plain or coroutine function.
            condition: Termination predicate, checked before each step.
            on_complete: Called once after the condition holds.
            wake: Optional event that ends the current interval early.
                It is cleared after every tick.

        Returns:
            The task driving the poll.
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(step, condition, on_complete, wake))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def over(
        self,
        items: Iterable[T],
        step: Callable[[T], Any],
        on_complete: Callable[[], Any] | None = None,
    ) -> asyncio.Task[None]:
        """Run ``step`` on each element of ``items``, one per tick.

        ``items`` is copied at call time, so later changes to the source
        collection do not affect this poll.
        """
        pending = list(items)
        position = 0

        def advance() -> Any:
            nonlocal position
            item = pending[position]
            position += 1
            return step(item)

        return self.until(advance, lambda: position >= len(pending), on_complete)

    async def _run(
        self,
        step: Callable[[], Any],
        condition: Callable[[], bool],
        on_complete: Callable[[], Any] | None,
        wake: asyncio.Event | None,
    ) -> None:
        ticks = 0
        while True:
            await self._wait(wake)
            ticks += 1
            if condition():
                break
            try:
                await _call(step)
            except Exception:
                logger.exception("Poll step failed on tick %d", ticks)

        logger.debug("Poll finished after %d ticks", ticks)
        if on_complete is not None:
            await _call(on_complete)

    async def _wait(self, wake: asyncio.Event | None) -> None:
        if wake is None:
            await asyncio.sleep(self._interval)
            return
        try:
            await asyncio.wait_for(wake.wait(), self._interval)
        except TimeoutError:
            pass
        finally:
            wake.clear()
