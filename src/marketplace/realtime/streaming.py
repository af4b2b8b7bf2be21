"""Bridge from the synchronous change feed to asyncio consumers."""

import asyncio
from collections.abc import Callable

from marketplace.realtime.feed import Subscription


class DeltaStream:
    """Async iterator over the deltas delivered to one subscription.

    Deltas are dropped once the consumer falls ``max_queue`` behind. Closing
    the stream closes the subscription.
    """

    def __init__(self, subscribe: Callable[[Callable], Subscription], max_queue: int = 100):
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)
        self.subscription = subscribe(self._callback)

    def _put(self, delta) -> None:
        if not self._queue.full():
            self._queue.put_nowait(delta)

    def _callback(self, delta) -> None:
        self._loop.call_soon_threadsafe(self._put, delta)

    @property
    def closed(self) -> bool:
        return self.subscription.closed

    def close(self) -> None:
        self.subscription.close()

    async def aclose(self) -> None:
        self.close()

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.closed:
            raise StopAsyncIteration
        return await self._queue.get()


def iterate_stream(subscribe: Callable[[Callable], Subscription], max_queue: int = 100) -> DeltaStream:
    """Subscribe now and return an async iterator over the delivered deltas.

    ``subscribe`` receives the callback to register, for example
    ``lambda cb: subscribe_to_notifications(cb, user_id)``. Must be called
    from a running event loop.
    """
    return DeltaStream(subscribe, max_queue=max_queue)
