"""Replace-on-reschedule delayed calls on an asyncio event loop."""

import asyncio
from typing import Any, Callable, Optional


class Debouncer:
    """
    Calls ``callback`` once ``delay`` seconds after the last trigger().

    Every trigger() cancels the pending call and schedules a new one, so a
    burst of triggers collapses into a single call with the final
    arguments. Coroutine callbacks are started as tasks; a call already
    running is never interrupted.
    """

    def __init__(self, callback: Callable[..., Any], delay: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.callback = callback
        self.delay = delay
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self.task: Optional[asyncio.Task] = None

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop if self._loop is not None else asyncio.get_running_loop()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args, **kwargs) -> None:
        loop = self._event_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire, args, kwargs)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple, kwargs: dict) -> None:
        self._handle = None
        result = self.callback(*args, **kwargs)
        if asyncio.iscoroutine(result):
            self.task = self._event_loop().create_task(result)
