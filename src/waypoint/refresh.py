"""External refresh signals.

A refresh signal tells the router that something a redirect rule depends
on has changed (typically session state) and the current location should
be resolved again.  The router only needs ``subscribe()``; it keeps the
returned unsubscribe handle and nothing else, so the signal's owner stays
in charge of its lifetime.

Two sources ship with waypoint:

- ``Notifier`` — a listener list; call ``notify()`` after a change.
- ``RefreshChannel`` — an anyio memory stream for async producers.  Its
  consumer drains every queued event before refreshing, so a burst of
  events costs one refresh.
"""

import logging
import math
import threading
from collections.abc import AsyncIterable, Callable
from typing import Any, Protocol, runtime_checkable

import anyio

from waypoint._internal.types import RefreshCallback

logger = logging.getLogger("waypoint.refresh")


@runtime_checkable
class RefreshSignal(Protocol):
    """Anything the router can subscribe to for refresh notifications."""

    def subscribe(self, callback: RefreshCallback) -> Callable[[], None]:
        """Register *callback*; return a function that unregisters it."""
        ...


class Notifier:
    """Listener-style refresh source.

    Usage::

        session = Notifier()
        router = Router(routes, redirect=require_login, refresh=session)

        def log_in() -> None:
            auth.logged_in = True
            session.notify()

    Listener failures are logged and do not stop the remaining listeners.
    """

    __slots__ = ("_listeners", "_lock")

    def __init__(self) -> None:
        self._listeners: list[RefreshCallback] = []
        self._lock = threading.Lock()

    def add_listener(self, callback: RefreshCallback) -> None:
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: RefreshCallback) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def subscribe(self, callback: RefreshCallback) -> Callable[[], None]:
        self.add_listener(callback)
        return lambda: self.remove_listener(callback)

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    def notify(self) -> None:
        """Call every registered listener once."""
        with self._lock:
            listeners = list(self._listeners)
        for callback in listeners:
            try:
                callback()
            except Exception:
                logger.exception("refresh listener %r failed", callback)


class RefreshChannel:
    """Stream-style refresh source backed by an anyio memory object stream.

    Producers call ``send()`` (from the event loop thread); one consumer
    task runs ``run()``.  Each time ``run()`` wakes it drains everything
    queued and notifies subscribers once, so only the most recent burst
    matters.

    Usage::

        channel = RefreshChannel()
        router = Router(routes, redirect=require_login, refresh=channel)

        async with anyio.create_task_group() as tg:
            tg.start_soon(channel.run)
            ...
            channel.send("session-changed")
            ...
            channel.close()
    """

    __slots__ = ("_notifier", "_receive", "_send")

    def __init__(self, max_buffer_size: float = math.inf) -> None:
        self._send, self._receive = anyio.create_memory_object_stream(max_buffer_size)
        self._notifier = Notifier()

    def subscribe(self, callback: RefreshCallback) -> Callable[[], None]:
        return self._notifier.subscribe(callback)

    def send(self, event: Any = None) -> None:
        """Queue an event.  Raises ``anyio.ClosedResourceError`` after ``close()``."""
        self._send.send_nowait(event)

    async def pipe(self, events: AsyncIterable[Any]) -> None:
        """Forward every item of an async iterable into the channel."""
        async for event in events:
            self.send(event)

    def close(self) -> None:
        """Stop accepting events; ``run()`` returns once the queue is drained."""
        self._send.close()

    async def run(self) -> None:
        """Consume events until the channel is closed."""
        async with self._receive:
            async for _event in self._receive:
                drained = 1
                while True:
                    try:
                        self._receive.receive_nowait()
                    except (anyio.WouldBlock, anyio.EndOfStream):
                        break
                    drained += 1
                logger.debug("refresh after %d coalesced event(s)", drained)
                self._notifier.notify()
