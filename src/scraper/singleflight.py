"""Per-key de-duplication of concurrent coroutine calls."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight:
    """Concurrent ``do`` calls sharing a key await one in-flight task.

    The task is shared and shielded: cancelling any caller, including the one
    that started it, leaves the task running for the others. The key is
    released as soon as the task settles, so a later call starts fresh.
    Exceptions reach every waiter.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Future[Any]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._inflight

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(partial(self._release, key))
        else:
            logger.debug("joining in-flight call", extra={"key": key})
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Future[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # retrieved here so a failure nobody awaited is not logged as lost
            task.exception()
