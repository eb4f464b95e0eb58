"""
Best-effort side effects.

Notifications, calendar sync and realtime publishing must never turn a
committed state change into a failed request. SideEffectRunner runs them
either inline or as tracked background tasks and logs every failure.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SideEffectRunner:
    """
    Runs side-effect coroutines without letting their errors escape.

    Example:
        ```python
        runner = SideEffectRunner()
        runner.fire("invitation-email", notifier.send_batch(recipients, "appointmentInvitation", data))
        binding = await runner.run("calendar-create", calendar.create_event(account, event))
        await runner.drain()  # on shutdown
        ```
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    async def run(self, name: str, coro: Coroutine[Any, Any, T]) -> T | None:
        """
        Await a side effect inline.

        Returns:
            The coroutine's result, or None if it raised
        """
        try:
            return await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Side effect '{name}' failed: {e}", exc_info=True)
            return None

    def fire(self, name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Schedule a side effect in the background; its failure is only logged."""
        task = asyncio.create_task(self.run(name, coro), name=f"side-effect:{name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding background side effects."""
        if not self._tasks:
            return
        tasks = list(self._tasks)
        done, not_done = await asyncio.wait(tasks, timeout=timeout)
        if not_done:
            logger.warning(f"{len(not_done)} side effects still running after drain timeout, cancelling")
            for task in not_done:
                task.cancel()
