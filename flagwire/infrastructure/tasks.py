"""Fire-and-forget scheduling of coroutines.

Inside a running event loop coroutines become tasks that are kept alive by
a module-level reference set until they finish. Without a running loop the
coroutine, and every task it spawns in turn, is driven to completion before
:func:`spawn` returns, so synchronous callers observe settled state.
"""

import asyncio
from typing import Any, Coroutine, Optional, Set

_background_tasks: Set["asyncio.Task[Any]"] = set()


def spawn(coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> Optional["asyncio.Task[Any]"]:
    """
    Schedule ``coro`` without awaiting it.

    Args:
        coro: Coroutine to run. It is expected to handle its own errors.
        name: Optional task name, used for debugging.

    Returns:
        The created task, or None when the coroutine already ran to
        completion because no event loop was running.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(_run_to_completion(coro))
        return None

    task = loop.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


async def _run_to_completion(coro: Coroutine[Any, Any, Any]) -> None:
    await coro
    current = asyncio.current_task()
    while True:
        pending = [task for task in asyncio.all_tasks() if task is not current]
        if not pending:
            return
        await asyncio.gather(*pending, return_exceptions=True)


def pending_tasks() -> Set["asyncio.Task[Any]"]:
    """Snapshot of scheduled tasks that have not finished yet."""
    return {task for task in _background_tasks if not task.done()}
