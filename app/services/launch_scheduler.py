"""
Delayed one-off tasks on the running event loop, with handles that can be cancelled.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)

class ScheduledTask:
    """Handle for a task created by LaunchScheduler.schedule()."""

    def __init__(self, name: str, delay: float, task: asyncio.Task):
        self.name = name
        self.delay = delay
        self.task = task

    def cancel(self) -> bool:
        return self.task.cancel()

    def done(self) -> bool:
        return self.task.done()

    def cancelled(self) -> bool:
        return self.task.cancelled()

    async def wait(self) -> Any:
        """Wait for the task and return its result (None if it failed)."""
        return await self.task

    def __repr__(self):
        return f"<ScheduledTask {self.name} delay={self.delay}s done={self.done()}>"

class LaunchScheduler:
    """Owns every pending timed task so they can be listed and cancelled together."""

    def __init__(self):
        self._tasks: List[ScheduledTask] = []

    def schedule(
        self,
        name: str,
        delay: float,
        job: Callable[[], Awaitable[Any]]
    ) -> ScheduledTask:
        """Run ``job()`` once after ``delay`` seconds. Must be called inside the event loop."""
        task = asyncio.create_task(self._run(name, delay, job), name=name)
        handle = ScheduledTask(name, delay, task)
        self._tasks.append(handle)
        task.add_done_callback(lambda _: self._forget(handle))
        logger.info(f"Scheduled {name} in {delay}s")
        return handle

    async def _run(self, name: str, delay: float, job: Callable[[], Awaitable[Any]]) -> Optional[Any]:
        await asyncio.sleep(delay)
        try:
            return await job()
        except Exception as e:
            logger.exception(f"Scheduled task {name} failed: {e}")
            return None

    def _forget(self, handle: ScheduledTask):
        if handle in self._tasks:
            self._tasks.remove(handle)

    def pending(self) -> List[ScheduledTask]:
        return [t for t in self._tasks if not t.done()]

    async def shutdown(self):
        """Cancel all pending tasks and wait for them to finish."""
        tasks = self.pending()
        for handle in tasks:
            handle.cancel()
        if tasks:
            await asyncio.gather(*(t.task for t in tasks), return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} scheduled task(s)")
