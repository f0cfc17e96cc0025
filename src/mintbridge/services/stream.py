"""Run an operation in the background and expose its events as an async iterator.

The operation runs in its own task and emits into a queue. If the consumer
stops iterating (e.g. the HTTP client disconnected), the task keeps running to
completion; an in-flight bridge or withdrawal is never aborted because nobody
is listening. Events emitted after that point are dropped.
"""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable

from mintbridge.events import ProgressEvent

logger = logging.getLogger(__name__)

Emit = Callable[[ProgressEvent], None]
Operation = Callable[[Emit], Awaitable[object]]

# Running operations, kept referenced until done
_background_tasks: set[asyncio.Task] = set()


class EventChannel:
    """Queue-backed event sink shared by an operation and its consumer."""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    def emit(self, event: ProgressEvent) -> None:
        if self._closed:
            logger.debug(f"Dropping {event.event.value} event: listener gone")
            return
        self._queue.put_nowait(event)

    def finish(self) -> None:
        if not self._closed:
            self._queue.put_nowait(None)

    def detach(self) -> None:
        """Mark the consumer as gone."""
        self._closed = True

    async def next(self):
        return await self._queue.get()


async def run_operation_stream(operation: Operation) -> AsyncIterator[ProgressEvent]:
    """Start an operation and yield its events until it finishes.

    Args:
        operation: Coroutine function receiving an emit callback

    Yields:
        ProgressEvent objects in emission order
    """
    channel = EventChannel()

    async def runner():
        try:
            await operation(channel.emit)
        except Exception as e:
            # Services report their own failures
            logger.exception(f"Operation crashed: {e}")
            channel.emit(ProgressEvent.error(str(e) or type(e).__name__))
        finally:
            channel.finish()

    task = asyncio.create_task(runner())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    try:
        while True:
            event = await channel.next()
            if event is None:
                break
            yield event
    finally:
        if not task.done():
            logger.info("Event listener disconnected; operation continues in background")
        channel.detach()
