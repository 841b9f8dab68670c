"""
Error-first callback support.

Every dispatcher operation is awaitable. Decorating it with `callbackable`
also lets it be called with a trailing ``callback=`` keyword:

    def done(error, rows):
        if error:
            ...
    dispatcher.execute("SELECT * FROM users", callback=done)

For coroutine operations the call is scheduled on the running loop and the
returned `asyncio.Task` can still be awaited; the callback receives
``(None, value)`` on success and ``(error, None)`` on failure.
"""
from __future__ import annotations
import asyncio
import functools
import inspect
from typing import Any, Awaitable, Callable, Optional

from .types import ResultCallback


def with_callback(awaitable: Awaitable[Any], callback: ResultCallback) -> asyncio.Task:
    """Run `awaitable` as a task and report its outcome to `callback`."""
    task = asyncio.ensure_future(awaitable)

    def _done(fut: asyncio.Future) -> None:
        if fut.cancelled():
            callback(asyncio.CancelledError(), None)
            return
        error = fut.exception()
        if error is not None:
            callback(error, None)
        else:
            callback(None, fut.result())

    task.add_done_callback(_done)
    return task


def callbackable(func: Callable[..., Any]) -> Callable[..., Any]:
    """Give `func` an optional keyword-only `callback` argument."""
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        def async_wrapper(*args: Any, callback: Optional[ResultCallback] = None, **kwargs: Any) -> Any:
            coro = func(*args, **kwargs)
            if callback is None:
                return coro
            return with_callback(coro, callback)
        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args: Any, callback: Optional[ResultCallback] = None, **kwargs: Any) -> Any:
        if callback is None:
            return func(*args, **kwargs)
        try:
            value = func(*args, **kwargs)
        except Exception as error:
            callback(error, None)
            return None
        callback(None, value)
        return value
    return wrapper
