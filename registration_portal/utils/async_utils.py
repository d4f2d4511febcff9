"""Helpers for driving coroutines from synchronous Streamlit code."""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Coroutine, TypeVar

T = TypeVar("T")


def run_async(factory: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """
    Execute a coroutine to completion from synchronous code.

    Uses a fresh event loop; if one is already running in this thread the
    coroutine runs on a worker thread instead. The factory is called once.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(factory())

    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(lambda: asyncio.run(factory())).result()
