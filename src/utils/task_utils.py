import asyncio
from typing import Dict, List, Optional


async def safe_cancel_task(task: Optional[asyncio.Task]) -> None:
    """Cancel a single task safely, handling CancelledError."""
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


async def cancel_tasks_with_timeout(
    tasks: List[Optional[asyncio.Task]],
    timeout: float = 2.0,
    logger=None
) -> bool:
    """
    Cancel multiple tasks with timeout protection.

    Args:
        tasks: List of asyncio tasks (None entries are ignored)
        timeout: Maximum time to wait for cancellation
        logger: Optional logger for timeout warnings

    Returns:
        bool: True if all tasks cancelled within timeout, False if timeout occurred
    """
    active_tasks = [task for task in tasks if task and not task.done()]
    if not active_tasks:
        return True

    for task in active_tasks:
        task.cancel()

    try:
        await asyncio.wait_for(
            asyncio.gather(*active_tasks, return_exceptions=True),
            timeout=timeout
        )
        return True
    except asyncio.TimeoutError:
        if logger:
            remaining = [task for task in active_tasks if not task.done()]
            logger.warning("Task cancellation timed out", timeout=timeout, remaining=len(remaining))
        return False


async def safe_close_connection(
    connection,
    timeout: float = 1.0,
    logger=None
) -> bool:
    """
    Close a connection with timeout protection; errors are logged, not raised.

    Returns:
        bool: True if closed cleanly within timeout
    """
    if not connection:
        return True

    try:
        await asyncio.wait_for(connection.close(), timeout=timeout)
        return True
    except asyncio.TimeoutError:
        if logger:
            logger.warning("Connection close timed out", timeout=timeout)
        return False
    except Exception as e:
        if logger:
            logger.error("Error closing connection", error_type=type(e).__name__, error_message=str(e))
        return False


class TaskManager:
    """
    Named background tasks with automatic cleanup.
    """

    def __init__(self, name: str = "task_manager"):
        self.name = name
        self._tasks: Dict[str, asyncio.Task] = {}

    def create_task(self, coro, name: str) -> asyncio.Task:
        """Create and track a task; a running task with the same name is an error."""
        existing = self._tasks.get(name)
        if existing is not None and not existing.done():
            coro.close()
            raise RuntimeError(f"Task '{self.name}.{name}' is already running")

        task = asyncio.create_task(coro, name=f"{self.name}.{name}")
        self._tasks[name] = task

        def cleanup_task(completed_task):
            if self._tasks.get(name) is completed_task:
                del self._tasks[name]

        task.add_done_callback(cleanup_task)
        return task

    def get_task(self, name: str) -> Optional[asyncio.Task]:
        return self._tasks.get(name)

    async def cancel_task(self, name: str) -> None:
        await safe_cancel_task(self._tasks.pop(name, None))

    async def shutdown(self, timeout: float = 2.0, logger=None) -> bool:
        """Cancel all managed tasks."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        return await cancel_tasks_with_timeout(tasks, timeout, logger)

    @property
    def active_task_count(self) -> int:
        return len([task for task in self._tasks.values() if not task.done()])
