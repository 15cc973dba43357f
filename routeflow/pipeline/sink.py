"""
Streaming sinks.

A sink receives each node's full output as soon as the node finishes. It
may be a plain function or a coroutine function, and one sink never sees
two chunks at once. Delivery is bounded by a timeout; a slow or failing
sink only loses live display, never the run's aggregate result.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Union

logger = logging.getLogger(__name__)

Sink = Callable[[str], Union[None, Awaitable[None]]]

_DONE = object()


def is_async_callable(obj: Any) -> bool:
    while isinstance(obj, functools.partial):
        obj = obj.func
    return inspect.iscoroutinefunction(obj) or (
        callable(obj) and inspect.iscoroutinefunction(getattr(obj, "__call__", None))
    )


async def _call_sync(sink: Sink, chunk: str) -> None:
    result = await asyncio.to_thread(sink, chunk)
    if inspect.isawaitable(result):
        await result


class SinkWriter:
    """
    Delivers chunks to one sink, one call at a time, in order.

    Coroutine functions are awaited on the loop. Any other callable runs in
    a worker thread; if it returns an awaitable, that is awaited too. A
    sync call that outlives ``timeout`` keeps running in its thread, and
    later chunks wait for it (up to ``timeout`` again) or are dropped, so
    the sink never sees two calls at once.
    """

    def __init__(self, sink: Sink, *, timeout: float):
        self._sink = sink
        self._timeout = timeout
        self._pending: asyncio.Task[None] | None = None

    @property
    def busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def write(self, chunk: str) -> bool:
        """Send ``chunk``. Returns False when it timed out, was dropped or the sink raised."""
        if self.busy:
            await asyncio.wait({self._pending}, timeout=self._timeout)
            if self.busy:
                logger.warning(
                    f"Sink still busy with an earlier chunk after {self._timeout}s, chunk dropped"
                )
                return False
        self._pending = None

        try:
            if is_async_callable(self._sink):
                await asyncio.wait_for(self._sink(chunk), timeout=self._timeout)
            else:
                call = asyncio.ensure_future(_call_sync(self._sink, chunk))
                call.add_done_callback(_log_late_failure)
                try:
                    await asyncio.wait_for(asyncio.shield(call), timeout=self._timeout)
                except asyncio.TimeoutError:
                    self._pending = call
                    raise
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Sink delivery timed out after {self._timeout}s, chunk dropped")
        except Exception as e:
            logger.warning(f"Sink raised {type(e).__name__}: {e}, chunk dropped")
        return False


def _log_late_failure(task: asyncio.Task[None]) -> None:
    # Late failures of timed-out calls surface here
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"Sink call finished with {type(task.exception()).__name__}")


async def deliver(sink: Sink, chunk: str, *, timeout: float) -> bool:
    """
    Send a single ``chunk`` to ``sink`` within ``timeout`` seconds.

    Use a SinkWriter to send several chunks to the same sink.
    """
    return await SinkWriter(sink, timeout=timeout).write(chunk)


class QueueSink:
    """
    Sink backed by a bounded asyncio.Queue, consumed as an async iterator.

    Example:
        sink = QueueSink(maxsize=8)
        task = asyncio.create_task(orchestrator.trigger(run, sink))
        task.add_done_callback(lambda _: sink.close())
        async for chunk in sink:
            print(chunk)
    """

    def __init__(self, maxsize: int = 0):
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def __call__(self, chunk: str) -> None:
        if self._closed:
            raise RuntimeError("QueueSink is closed")
        await self._queue.put(chunk)

    def close(self) -> None:
        """Mark the stream finished. Buffered chunks are still yielded."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_DONE)
        except asyncio.QueueFull:
            # Consumer sees closed + empty queue once it drains the buffer
            pass

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    async def __anext__(self) -> str:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _DONE:
            raise StopAsyncIteration
        return item


__all__ = ["QueueSink", "Sink", "SinkWriter", "deliver", "is_async_callable"]
