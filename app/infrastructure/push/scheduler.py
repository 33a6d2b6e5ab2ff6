"""Run receipt checks once, some time after a dispatch cycle finished."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Sized
from typing import Any, TypeVar

from anyio import from_thread, to_thread

logger = logging.getLogger(__name__)

TrackerT = TypeVar("TrackerT", bound=Sized)


class ReceiptCheckScheduler:
    """Schedule ``job(tracker)`` to run ``delay`` seconds from now.

    The job runs exactly once per call to :meth:`schedule`, detached from the
    caller. Scheduled checks cannot be cancelled or awaited and are lost when
    the process exits.
    """

    def __init__(self, job: Callable[[Any], Any], *, delay: float) -> None:
        self._job = job
        self.delay = delay
        self._tasks: set[asyncio.Task[None]] = set()

    def schedule(self, tracker: TrackerT) -> None:
        if not len(tracker):
            logger.debug("No pending push tickets; receipt check not scheduled")
            return

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            try:
                # Sync FastAPI routes run in anyio worker threads.
                from_thread.run_sync(self._spawn, tracker)
            except RuntimeError:
                self._start_timer(tracker)
        else:
            self._spawn(tracker)
        logger.info(
            "Receipt check for %s push tickets scheduled in %s seconds",
            len(tracker),
            self.delay,
        )

    def _spawn(self, tracker: TrackerT) -> None:
        task = asyncio.get_running_loop().create_task(self._run_later(tracker))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_later(self, tracker: TrackerT) -> None:
        await asyncio.sleep(self.delay)
        try:
            await to_thread.run_sync(self._job, tracker)
        except Exception:
            logger.exception("Receipt check failed")

    def _start_timer(self, tracker: TrackerT) -> None:
        timer = threading.Timer(self.delay, self._run_guarded, args=(tracker,))
        timer.daemon = True
        timer.start()

    def _run_guarded(self, tracker: TrackerT) -> None:
        try:
            self._job(tracker)
        except Exception:
            logger.exception("Receipt check failed")


__all__ = ["ReceiptCheckScheduler"]
