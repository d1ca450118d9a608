"""Helpers for calling synchronous stores from async code."""

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


async def run_blocking(
    func: Callable[..., T],
    /,
    *args: Any,
    timeout: float | None = None,
    **kwargs: Any,
) -> T:
    """Run a blocking store call in a worker thread.

    Raises:
        TimeoutError: If ``timeout`` seconds elapse first. The worker thread
            is not interrupted and may still complete.
    """
    call = asyncio.to_thread(func, *args, **kwargs)
    if timeout:
        return await asyncio.wait_for(call, timeout)
    return await call
