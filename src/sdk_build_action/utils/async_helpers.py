from __future__ import annotations

import asyncio
from typing import Any, Coroutine, TypeVar

T = TypeVar("T")


async def gather_all(*coros: Coroutine[Any, Any, T]) -> list[T]:
    """Run *coros* concurrently and return their results in argument order.

    Unlike ``asyncio.gather``, the first failure cancels every sibling still
    running before it propagates, so no task outlives the call.

    Raises:
        The first exception raised by any of *coros*, unwrapped from the
        task group's ``ExceptionGroup``.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in coros]
    except BaseExceptionGroup as exc:
        raise exc.exceptions[0] from None
    return [task.result() for task in tasks]
