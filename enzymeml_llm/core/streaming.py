"""
Streaming Aggregator for enzymeml-llm

Turns the push-style listeners of a ResponseStream into an async iterator
of StreamItems. Items are queued in arrival order; iteration ends once the
response has completed and the queue is drained.
"""

import asyncio
import logging
from typing import Any, AsyncIterator

from ..schemas.streaming import RefusalDelta, StreamError, StreamItem, TextDelta
from .llm_client import ERROR, REFUSAL_DELTA, TEXT_DELTA, ResponseStream


logger = logging.getLogger(__name__)

_DONE = object()


class StreamAggregator:
    """
    Pull-based view over a ResponseStream.

    Three handles over the same request:
    - ``stream``: the underlying ResponseStream
    - iteration: ``async for item in aggregator``
    - ``final``: the completion future (a FinalResponse)

    The stream is started when the aggregator is created, so it must be
    created inside a running event loop.
    """

    def __init__(self, stream: ResponseStream):
        self.stream = stream
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._done = False

        stream.on(TEXT_DELTA, lambda delta: self._push(TextDelta(delta=delta)))
        stream.on(REFUSAL_DELTA, lambda delta: self._push(RefusalDelta(delta=delta)))
        stream.on(ERROR, lambda error: self._push(StreamError(error=error)))

        self.final: asyncio.Future = stream.start()
        self.final.add_done_callback(self._on_final)

    @property
    def done(self) -> bool:
        """True once the response completed (successfully or not)."""
        return self._done

    def _push(self, item: StreamItem) -> None:
        self._queue.put_nowait(item)

    def _on_final(self, future: asyncio.Future) -> None:
        self._done = True
        self._queue.put_nowait(_DONE)

    def __aiter__(self) -> AsyncIterator[StreamItem]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[StreamItem]:
        while True:
            if self._done and self._queue.empty():
                return
            item = await self._queue.get()
            if item is _DONE:
                return
            yield item

    async def collect(self) -> list[StreamItem]:
        """Drain the remaining items into a list."""
        return [item async for item in self]
