"""
Timer helpers on top of asyncio.

Debouncer coalesces bursts of events into one call; call_later runs a
callback once after a delay. Callbacks may be plain functions or coroutine
functions.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


async def _invoke(callback: Callable[..., Any], args: tuple) -> Any:
    """Call a sync or async callback, logging instead of raising."""
    try:
        result = callback(*args)
        if inspect.isawaitable(result):
            result = await result
        return result
    except asyncio.CancelledError:
        raise
    except Exception:
        logger.exception(f"Scheduled callback {getattr(callback, '__name__', callback)!r} failed")
        return None


async def _sleep_then_invoke(delay: float, callback: Callable[..., Any], args: tuple) -> Any:
    await asyncio.sleep(delay)
    return await _invoke(callback, args)


def call_later(delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.Task:
    """
    Run callback(*args) after `delay` seconds.

    Returns the task so callers can await or cancel it. Must be called
    from inside a running event loop.
    """
    return asyncio.get_running_loop().create_task(
        _sleep_then_invoke(delay, callback, args)
    )


class Debouncer:
    """
    Trailing-edge debounce.

    Each trigger() cancels the pending (not yet fired) call and schedules a
    new one. A callback that has already started is left to finish.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        self.delay = delay
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled but has not fired yet."""
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def close(self) -> None:
        """Drop the pending call and cancel callbacks still running."""
        self.cancel()
        for task in list(self._running):
            task.cancel()
        self._running.clear()

    def _fire(self, args: tuple) -> None:
        self._handle = None
        task = asyncio.get_running_loop().create_task(_invoke(self._callback, args))
        self._running.add(task)
        task.add_done_callback(self._running.discard)
