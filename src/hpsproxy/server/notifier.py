"""Fan-out of HTTP Status Code changes to notification subscribers."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable, Hashable

from .state import NamedBuffer

_LOGGER = logging.getLogger(__name__)

Sender = Callable[[bytes], Awaitable[None] | None]


class Subscription:
    """One subscriber's queue of status values.

    The value current at subscribe time is queued first, followed by every
    later published value in publish order.
    """

    def __init__(self, key: Hashable, initial: bytes):
        self.key = key
        self.task: asyncio.Task | None = None
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._closed = False
        self._queue.put_nowait(initial)

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, value: bytes) -> None:
        if not self._closed:
            self._queue.put_nowait(value)

    def close(self) -> None:
        """Stop the subscription; a running delivery task is cancelled."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)
        if self.task is not None and not self.task.done():
            self.task.cancel()

    async def get(self, timeout: float | None = None) -> bytes | None:
        """Wait for the next value (None once the subscription is closed).

        Raises:
            asyncio.TimeoutError: If no value arrives within ``timeout``
        """
        value = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        if value is None:
            # Keep the end marker for any later get()
            self._queue.put_nowait(None)
        return value

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> bytes:
        value = await self.get()
        if value is None:
            raise StopAsyncIteration
        return value

    async def run(self, send: Sender) -> None:
        """Deliver values through ``send`` until closed or ``send`` fails."""
        _LOGGER.debug("Notification session start for %s", self.key)
        try:
            async for value in self:
                _LOGGER.debug("Notifying %s with value %s", self.key, value.hex())
                result = send(value)
                if inspect.isawaitable(result):
                    await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _LOGGER.warning("Notification error for %s: %s", self.key, e)
        finally:
            self._closed = True
            _LOGGER.debug("Notification session stop for %s", self.key)


class StatusNotifier:
    """Broadcast point for the HTTP Status Code value.

    Publishing stores the value and queues it to every live subscription
    under one lock, and subscribing snapshots the value under the same lock,
    so no update can fall between a snapshot and the first queued change.
    """

    def __init__(self, buffer: NamedBuffer):
        self._buffer = buffer
        self._subscriptions: dict[Hashable, Subscription] = {}
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return sum(1 for sub in self._subscriptions.values() if not sub.closed)

    def subscribe(self, key: Hashable) -> Subscription:
        """Register ``key``, replacing any earlier subscription it had."""
        with self._lock:
            previous = self._subscriptions.pop(key, None)
            subscription = Subscription(key, self._buffer.read())
            self._subscriptions[key] = subscription
        if previous is not None:
            _LOGGER.debug("Replacing existing subscription for %s", key)
            previous.close()
        return subscription

    def start_delivery(self, key: Hashable, send: Sender) -> Subscription:
        """Subscribe ``key`` and run its delivery loop as a background task.

        Must be called from a running event loop.
        """
        subscription = self.subscribe(key)
        subscription.task = asyncio.get_running_loop().create_task(
            subscription.run(send)
        )
        subscription.task.add_done_callback(lambda _: self._discard(subscription))
        return subscription

    def _discard(self, subscription: Subscription) -> None:
        """Drop a finished subscription unless its key was already reused."""
        with self._lock:
            if self._subscriptions.get(subscription.key) is subscription:
                del self._subscriptions[subscription.key]

    def unsubscribe(self, key: Hashable) -> None:
        with self._lock:
            subscription = self._subscriptions.pop(key, None)
        if subscription is not None:
            subscription.close()

    def publish(self, value: bytes) -> int:
        """Store a new status value and queue it to all subscribers.

        Returns:
            Number of subscriptions the value was queued to
        """
        value = bytes(value)
        with self._lock:
            self._buffer.replace(value)
            for key in [key for key, sub in self._subscriptions.items() if sub.closed]:
                del self._subscriptions[key]
            live = list(self._subscriptions.values())
            for subscription in live:
                subscription.deliver(value)
        _LOGGER.debug("Published status %s to %d subscriber(s)", value.hex(), len(live))
        return len(live)

    def close(self) -> None:
        """Close every subscription."""
        with self._lock:
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()
        for subscription in subscriptions:
            subscription.close()
