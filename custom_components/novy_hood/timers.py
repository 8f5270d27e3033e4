"""Named, cancelable delayed callbacks (one handle per purpose)."""
from __future__ import annotations
import asyncio
import inspect
import logging
from typing import Any, Callable

_LOGGER = logging.getLogger(__name__)


class TimerRegistry:
    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self._handles: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task] = set()

    def arm(self, purpose: str, delay: float, callback: Callable[[], Any]) -> None:
        """
        Run *callback* after *delay* seconds.  A live handle for the same
        purpose is NOT cancelled here; call ``cancel(purpose)`` first.
        """
        if self.is_armed(purpose):
            _LOGGER.warning("Timer %s re-armed while still pending", purpose)
        _LOGGER.debug("Arming %s timer (%ss)", purpose, delay)
        self._handles[purpose] = self._loop.call_later(delay, self._fire, purpose, callback)

    def cancel(self, purpose: str) -> None:
        if (handle := self._handles.pop(purpose, None)) is not None:
            _LOGGER.debug("Cancelling %s timer", purpose)
            handle.cancel()

    def cancel_all(self) -> None:
        for purpose in list(self._handles):
            self.cancel(purpose)
        for task in self._tasks:
            task.cancel()

    def is_armed(self, purpose: str) -> bool:
        handle = self._handles.get(purpose)
        return handle is not None and not handle.cancelled()

    def _fire(self, purpose: str, callback: Callable[[], Any]) -> None:
        self._handles.pop(purpose, None)
        _LOGGER.debug("Timer %s fired", purpose)
        result = callback()
        if inspect.isawaitable(result):
            task = self._loop.create_task(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
