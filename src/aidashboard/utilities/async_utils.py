import asyncio
from typing import Awaitable, TypeVar

from aidashboard.utilities.logging import get_logger

T = TypeVar("T")

logger = get_logger("Tasks")

# strong references to tasks that must finish even if their caller goes away
BACKGROUND_TASKS: set[asyncio.Task] = set()


def _discard(task: asyncio.Task) -> None:
    BACKGROUND_TASKS.discard(task)
    if task.cancelled():
        logger.warning(f"Task {task.get_name()} cancelled")
        return
    exception = task.exception()
    if exception:
        logger.error(f"Task {task.get_name()} raised exception {exception!r}")


def save_task(task: asyncio.Task) -> asyncio.Task:
    """Keep the task alive until it is done."""
    BACKGROUND_TASKS.add(task)
    task.add_done_callback(_discard)
    return task


async def run_to_completion(coro: Awaitable[T], name: str | None = None) -> T:
    """
    Run `coro` on its own task and wait for it.

    Cancelling the caller does not cancel the task: it finishes on its own
    and its result is dropped.
    """
    task = save_task(asyncio.ensure_future(coro))
    if name:
        task.set_name(name)
    return await asyncio.shield(task)
