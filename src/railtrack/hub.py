"""Broadcast hub: fan-out of state changes to connected observers.

Each observer owns a bounded outbound queue drained by its own pump task,
so a slow observer only backs up its own queue. Delivery is best-effort:
when an observer's queue is full the message is dropped for that observer,
and an observer whose transport fails is removed from the active set.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from railtrack.exceptions import TransportFailureError

_logger = logging.getLogger(__name__)

Message = dict[str, Any]
Sender = Callable[[Message], Awaitable[None]]

_observer_ids = itertools.count(1)


class Observer:
    """A connected recipient of pushed messages.

    Carries no persisted identity; ``name`` only labels log lines.
    """

    def __init__(self, send: Sender, *, queue_size: int, name: str | None = None) -> None:
        self.name = name or f"observer-{next(_observer_ids)}"
        self._send = send
        self._queue: asyncio.Queue[Message] = asyncio.Queue(maxsize=queue_size)
        self._task: asyncio.Task[None] | None = None
        self._sending = False
        self.delivered = 0
        self.dropped = 0

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def offer(self, message: Message) -> bool:
        """Queue *message* without blocking; ``False`` when it had to be dropped."""
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped += 1
            _logger.debug("Observer %s queue full, dropped message type=%s", self.name, message.get("type"))
            return False
        return True

    def __repr__(self) -> str:
        return f"Observer({self.name!r}, queued={self._queue.qsize()}, dropped={self.dropped})"


class BroadcastHub:
    """Registry of observers plus the fan-out over them."""

    def __init__(self, *, queue_size: int = 64) -> None:
        self._queue_size = queue_size
        self._observers: set[Observer] = set()
        self._closed = False

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def observers(self) -> tuple[Observer, ...]:
        return tuple(self._observers)

    def connect(self, send: Sender, snapshot: Message, *, name: str | None = None) -> Observer:
        """Register an observer and queue *snapshot* as its first message.

        Must run on the event loop. Because it is synchronous, no event can
        be published between capturing the snapshot and registering the
        observer.
        """
        if self._closed:
            raise RuntimeError("BroadcastHub is closed")
        observer = Observer(send, queue_size=self._queue_size, name=name)
        observer.offer(snapshot)
        observer._task = asyncio.get_running_loop().create_task(  # noqa: SLF001
            self._pump(observer),
            name=f"railtrack-pump-{observer.name}",
        )
        self._observers.add(observer)
        _logger.info("Observer %s connected (%d total)", observer.name, len(self._observers))
        return observer

    def disconnect(self, observer: Observer) -> None:
        """Remove *observer*; safe to call repeatedly or while a broadcast is in flight."""
        if observer not in self._observers:
            return
        self._observers.discard(observer)
        task = observer._task  # noqa: SLF001
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        _logger.info("Observer %s disconnected (%d remaining)", observer.name, len(self._observers))

    def publish(self, message: Message) -> int:
        """Offer *message* to every observer connected right now.

        Iterates over a copy of the registry, so observers that disconnect
        mid-broadcast cannot disturb the loop. Returns how many observers
        accepted the message.
        """
        accepted = 0
        for observer in tuple(self._observers):
            if observer.offer(message):
                accepted += 1
        return accepted

    async def _pump(self, observer: Observer) -> None:
        queue = observer._queue  # noqa: SLF001
        while True:
            message = await queue.get()
            observer._sending = True  # noqa: SLF001
            try:
                await observer._send(message)  # noqa: SLF001
            except TransportFailureError as exc:
                _logger.warning("Observer %s transport failed, dropping: %s", observer.name, exc)
                self.disconnect(observer)
                return
            except Exception:
                _logger.exception("Observer %s send raised, dropping", observer.name)
                self.disconnect(observer)
                return
            finally:
                observer._sending = False  # noqa: SLF001
            observer.delivered += 1

    async def wait_drained(self, timeout: float = 1.0) -> None:
        """Wait until every observer's queue is empty (used by tests and shutdown)."""

        async def _drain() -> None:
            while any(o._queue.qsize() or o._sending for o in self._observers):  # noqa: SLF001
                await asyncio.sleep(0)

        await asyncio.wait_for(_drain(), timeout)

    async def close(self) -> None:
        """Disconnect every observer and wait for their pumps to finish."""
        self._closed = True
        observers = tuple(self._observers)
        tasks = [o._task for o in observers if o._task is not None]  # noqa: SLF001
        for observer in observers:
            self.disconnect(observer)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
