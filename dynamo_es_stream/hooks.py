"""
Invocation of user-supplied hooks, resolvers and client calls.

Each may be a plain function or a coroutine function; either way the
result is fully resolved before the pipeline moves on.
"""

import asyncio
import inspect
from typing import Any, Callable


async def call_hook(hook: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call ``hook`` and await its result when it is awaitable."""
    result = hook(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


async def call_blocking(
    func: Callable[..., Any], *args: Any, **kwargs: Any
) -> Any:
    """
    Call ``func`` without stalling the event loop.

    Coroutine functions are awaited directly. Plain functions, such as the
    synchronous Elasticsearch client's ``bulk``, run in a worker thread.
    """
    if inspect.iscoroutinefunction(func):
        return await func(*args, **kwargs)
    result = await asyncio.to_thread(func, *args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
