"""
Helpers for calling the async API from synchronous code.
"""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine to completion from synchronous code.

    Raises:
        RuntimeError: If called while an event loop is already running in
            this thread (await the async variant instead)
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    coro.close()
    raise RuntimeError(
        "Sync wrapper called from a running event loop; await the async function instead"
    )
