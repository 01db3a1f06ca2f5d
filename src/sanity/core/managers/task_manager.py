# src/sanity/core/managers/task_manager.py
import asyncio
from typing import Set

from sanity.core.event_bus import EventBus


class TaskManager:
    """
    Manages background task lifecycle and coordination.
    Single responsibility: Task creation, monitoring, and cleanup.
    """

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        # Strong references, otherwise the loop may drop a task mid-flight.
        self.tasks: Set[asyncio.Task] = set()

    def start_task(self, coroutine, name: str = "task") -> asyncio.Task:
        """Runs a coroutine fire-and-forget; failures are logged, never raised."""
        task = asyncio.create_task(coroutine, name=name)
        self.tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task):
        self.tasks.discard(task)
        try:
            task.result()
        except asyncio.CancelledError:
            self.log("info", f"Task '{task.get_name()}' was cancelled")
        except Exception as e:
            self.log("error", f"Task '{task.get_name()}' failed: {e}")
            self.event_bus.emit("task_failed", task.get_name(), str(e))

    async def cancel_all_tasks(self):
        """Cancel all running tasks and wait for them to complete."""
        tasks_to_cancel = [task for task in self.tasks if not task.done()]
        for task in tasks_to_cancel:
            task.cancel()
        if tasks_to_cancel:
            self.log("info", f"Waiting for {len(tasks_to_cancel)} tasks to cancel...")
            await asyncio.gather(*tasks_to_cancel, return_exceptions=True)
        self.tasks.clear()

    def get_task_summary(self) -> dict:
        running = [task.get_name() for task in self.tasks if not task.done()]
        return {"running": len(running), "names": running}

    def log(self, level: str, message: str):
        self.event_bus.emit("log_message_received", "TaskManager", level, message)
