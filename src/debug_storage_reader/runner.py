"""Schedule reader coroutines on the GUI thread's asyncio loop.

The inspector installs a :class:`qasync.QEventLoop`, so the asyncio loop and
the Qt event loop are one and the same.  Every read becomes a task on that
loop; results are delivered from the task's done-callback, which runs on the
GUI thread.  Readers holding loop-bound resources (client sessions,
connection pools) therefore see the same loop on every read.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, Set

logger = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[Any]]
OnSuccess = Callable[[Any], Any]
OnError = Callable[[BaseException], Any]


class ReadRunner(Protocol):
    """Anything able to execute a read and report its outcome."""

    def submit(self, fetch: Fetch, on_success: OnSuccess, on_error: OnError) -> None:
        ...  # pragma: no cover - interface


class AsyncioReadRunner:
    """Run each read as a task on a single, long-lived event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._tasks: Set["asyncio.Future[Any]"] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_event_loop()
        return self._loop

    def submit(self, fetch: Fetch, on_success: OnSuccess, on_error: OnError) -> None:
        task = asyncio.ensure_future(fetch(), loop=self.loop)
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._settle, on_success, on_error))

    def _settle(self, on_success: OnSuccess, on_error: OnError, task: "asyncio.Future[Any]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug("Read cancelled before it settled")
            return
        error = task.exception()
        if error is not None:
            on_error(error)
        else:
            on_success(task.result())

    def pending_count(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every submitted read has settled and been delivered."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            await asyncio.sleep(0)

    def shutdown(self) -> None:
        """Cancel reads still outstanding when the application exits."""

        if self._tasks:
            logger.debug("Cancelling %d outstanding read(s)", len(self._tasks))
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()


_default_runner: AsyncioReadRunner | None = None


def default_runner() -> AsyncioReadRunner:
    """Return the process wide runner shared by widgets without their own."""

    global _default_runner
    if _default_runner is None:
        _default_runner = AsyncioReadRunner()
    return _default_runner


__all__ = ["ReadRunner", "AsyncioReadRunner", "default_runner"]
