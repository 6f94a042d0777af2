"""Fan-in event loop that hands each event to its own task.

Both event sources put normalized events on one unbounded queue. The
dispatcher waits on that queue and starts an independent task per event, so
a slow or failing event never holds up the next one. There is no ordering
between events, only within the handling of a single event.
"""

from __future__ import annotations

import asyncio
import contextlib
import datetime as dt
import time
import typing as typ

from bugbridge.logging import get_logger, log_info

from .observability import BridgeEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import BridgeEvent, SyncOutcome

logger = get_logger(__name__)

EventHandler = typ.Callable[["BridgeEvent"], "cabc.Awaitable[SyncOutcome]"]


def _elapsed(started: float) -> dt.timedelta:
    return dt.timedelta(seconds=time.monotonic() - started)


class EventDispatcher:
    """Consume the merged event queue and run one task per event.

    Parameters
    ----------
    queue
        Queue shared by the chat gateway and the webhook endpoint.
    handler
        Coroutine function handling one event, normally
        :meth:`bugbridge.engine.sync.SyncEngine.handle`.
    max_in_flight
        Optional bound on concurrently running handlers. ``None`` spawns a
        task for every event without backpressure.
    event_logger
        Structured logger for outcomes and failures.

    """

    def __init__(
        self,
        queue: asyncio.Queue[BridgeEvent],
        handler: EventHandler,
        *,
        max_in_flight: int | None = None,
        event_logger: BridgeEventLogger | None = None,
    ) -> None:
        """Initialise the dispatcher without starting it."""
        self._queue = queue
        self._handler = handler
        self._limit = (
            asyncio.Semaphore(max_in_flight) if max_in_flight is not None else None
        )
        self._event_logger = event_logger or BridgeEventLogger()
        self._tasks: set[asyncio.Task[None]] = set()
        self._loop_task: asyncio.Task[None] | None = None

    @property
    def in_flight(self) -> int:
        """Number of events currently being handled."""
        return len(self._tasks)

    def start(self) -> asyncio.Task[None]:
        """Run :meth:`run` in a background task and return it."""
        if self._loop_task is None or self._loop_task.done():
            self._loop_task = asyncio.create_task(self.run(), name="bridge-dispatcher")
        return self._loop_task

    async def run(self) -> None:
        """Dispatch events until cancelled."""
        while True:
            event = await self._queue.get()
            if self._limit is not None:
                await self._limit.acquire()
            self._spawn(event)

    def _spawn(self, event: BridgeEvent) -> None:
        task = asyncio.create_task(self._handle(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle(self, event: BridgeEvent) -> None:
        started = time.monotonic()
        try:
            outcome = await self._handler(event)
        except Exception as exc:  # noqa: BLE001 - isolate one event's failure
            self._event_logger.log_event_failed(event, exc, _elapsed(started))
        else:
            self._event_logger.log_event_handled(event, outcome, _elapsed(started))
        finally:
            self._queue.task_done()
            if self._limit is not None:
                self._limit.release()

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def stop(self) -> None:
        """Stop dispatching and drop in-flight events."""
        dropped = len(self._tasks)
        tasks = [t for t in (self._loop_task, *self._tasks) if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._loop_task = None
        log_info(logger, "Dispatcher stopped; dropped %d in-flight event(s)", dropped)
