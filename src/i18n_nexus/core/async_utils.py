"""Async utilities for running blocking I/O off the event loop."""

import asyncio
import logging
from typing import Any, Callable, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Used for HTTP calls to translation backends, ``git`` subprocesses and
    file I/O.  The caller awaits the result before doing anything else, so
    work is never run in parallel.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)

    Example:
        tree = await run_sync(read_json_tree, path)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
