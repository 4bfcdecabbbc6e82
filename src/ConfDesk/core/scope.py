"""Structured lifetime for the asynchronous work a view starts."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Coroutine, TypeVar

from ConfDesk.utils.log import log

T = TypeVar("T")


class ViewScope:
    """Own the tasks spawned by one view and cancel them when it closes.

    Results of tasks that finish after the scope closed are dropped, so a
    closed view is never updated.

    Usage::

        async with ViewScope("reviewer.articles") as scope:
            scope.spawn(gateway.list_articles(), on_result=view.load)
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.closed = False
        self._tasks: set[asyncio.Task] = set()

    def spawn(
        self,
        coro: Coroutine[Any, Any, T],
        *,
        on_result: Callable[[T], Any] | None = None,
    ) -> asyncio.Task[T]:
        if self.closed:
            coro.close()
            raise RuntimeError(f"View scope {self.name} is closed")
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(lambda done: self._finish(done, on_result))
        return task

    def _finish(self, task: asyncio.Task, on_result: Callable[[Any], Any] | None) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            if on_result is not None:
                log.warning("%s: background task failed: %s", self.name, error)
            return
        if self.closed:
            log.debug("%s: dropping result that arrived after close", self.name)
            return
        if on_result is not None:
            on_result(task.result())

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait(self) -> None:
        """Wait for every task spawned so far."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            log.debug("%s: cancelled %d pending task(s)", self.name, len(tasks))

    async def __aenter__(self) -> ViewScope:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def run_in_scope(scope: ViewScope, awaitable: Awaitable[T]) -> T:
    """Await ``awaitable`` as a task owned by ``scope`` and return its result."""

    async def _wrap() -> T:
        return await awaitable

    return await scope.spawn(_wrap())
