"""Timer scheduling for the playback engine.

Components never touch the event loop directly. They arm timers through a
Scheduler matching the protocol:

    def call_later(self, delay: float, callback) -> TimerHandle: ...
    def time(self) -> float: ...

LoopScheduler forwards to the running asyncio loop. Tests drive the engine
with a manual virtual-time scheduler instead.

A TimerScope groups the timers owned by one phase or one sub-player cursor.
Closing the scope cancels everything still pending in it, and a callback
whose scope was closed after it was queued never runs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def time(self) -> float: ...


class LoopScheduler:
    """Scheduler backed by an asyncio event loop.

    The loop is resolved lazily so a scheduler can be built outside a
    running loop and used once the app starts serving.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self._get_loop().call_later(max(delay, 0.0), callback)

    def time(self) -> float:
        return self._get_loop().time()


class TimerScope:
    """A set of timers cancelled together."""

    def __init__(self, scheduler: Scheduler, name: str = "") -> None:
        self._scheduler = scheduler
        self._name = name
        self._handles: set[TimerHandle] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return len(self._handles)

    def time(self) -> float:
        return self._scheduler.time()

    def arm(self, delay: float, callback: Callable[[], None]) -> TimerHandle | None:
        """Schedule callback after delay seconds. Returns None once closed."""
        if self._closed:
            logger.debug("timer scope %s closed, not arming", self._name)
            return None
        handle: TimerHandle | None = None

        def fire() -> None:
            self._handles.discard(handle)
            if not self._closed:
                callback()

        handle = self._scheduler.call_later(delay, fire)
        self._handles.add(handle)
        return handle

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()

    def close(self) -> None:
        self._closed = True
        self.cancel_all()

    def __enter__(self) -> TimerScope:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
