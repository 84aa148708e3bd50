"""
Ad timers for one playback session.

Every timer is an asyncio task owned by an AdScheduler, so tearing the
session down (client disconnect, end of stream) cancels all of them at once.
"""
import asyncio
import inspect
import logging
import random
from typing import Any, AsyncIterator, Callable, Dict, Set, Union

from evano.schemas import AdPlan

logger = logging.getLogger(__name__)

Delay = Union[float, Callable[[], float]]


async def _invoke(callback: Callable, *args) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class AdScheduler:
    """Owns delayed and repeating callbacks; ``close()`` cancels them all."""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def active(self) -> bool:
        """True while any timer is still pending."""
        return bool(self._tasks)

    def _spawn(self, coro) -> asyncio.Task:
        if self._closed:
            coro.close()
            raise RuntimeError("Scheduler is closed")
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def call_later(self, delay: float, callback: Callable, *args) -> asyncio.Task:
        """Run ``callback`` once after ``delay`` seconds."""
        async def runner():
            await asyncio.sleep(delay)
            # Leave the pending set before firing so ``active`` is accurate to observers
            self._tasks.discard(asyncio.current_task())
            await _invoke(callback, *args)

        return self._spawn(runner())

    def call_every(self, interval: Delay, callback: Callable, *args) -> asyncio.Task:
        """Run ``callback`` repeatedly; ``interval`` may be a callable drawn anew each time."""
        async def runner():
            while True:
                await asyncio.sleep(interval() if callable(interval) else interval)
                try:
                    await _invoke(callback, *args)
                except Exception:
                    logger.exception("Repeating ad callback failed")

        return self._spawn(runner())

    async def close(self) -> None:
        """Cancel every pending timer and wait for them to finish."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def __aenter__(self) -> "AdScheduler":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def ad_cues(plan: AdPlan, rng: random.Random = None) -> AsyncIterator[Dict[str, Any]]:
    """
    Yield ad cue events for a playback session as their timers fire.

    Ends once nothing is left to fire. With a lower-third ad the stream runs
    until the consumer stops iterating, which cancels the timers.
    """
    rng = rng or random.Random()
    queue: asyncio.Queue = asyncio.Queue()

    async with AdScheduler() as scheduler:
        if plan.preroll:
            queue.put_nowait({"event": "preroll", "ad": plan.preroll.model_dump()})

        if plan.banner:
            scheduler.call_later(
                plan.banner_delay,
                queue.put_nowait,
                {"event": "banner", "ad": plan.banner.model_dump()},
            )

        if plan.lower_third:
            ad = plan.lower_third.model_dump()

            def show_lower_third():
                queue.put_nowait({"event": "lower_third_show", "ad": ad})
                scheduler.call_later(
                    plan.lower_third_visible,
                    queue.put_nowait,
                    {"event": "lower_third_hide", "ad": ad},
                )

            scheduler.call_every(
                lambda: rng.uniform(plan.lower_third_min_interval, plan.lower_third_max_interval),
                show_lower_third,
            )

        while scheduler.active or not queue.empty():
            yield await queue.get()
