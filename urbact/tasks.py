# urbact/tasks.py
"""
Remote requests as futures with continuations.

`issue()` hands a blocking backend call to a worker pool and returns at once.
Continuations never run on the worker: `drain()` runs them on the caller's
thread, so every session mutation happens on the dashboard's single logical
thread of control. Each task carries the session generation it was issued
under; the continuation decides whether that generation is still current.
"""

import concurrent.futures
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from loguru import logger


@dataclass
class RemoteTask:
    future: concurrent.futures.Future
    generation: int
    on_result: Callable[[Any], Any]
    label: str = ""

    @property
    def done(self) -> bool:
        return self.future.done()


class TaskRunner:
    def __init__(self, max_workers: int = 4, executor: Optional[concurrent.futures.Executor] = None):
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="urbact-remote"
        )
        self._tasks: List[RemoteTask] = []

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def pending_for(self, generation: int) -> int:
        """Unfinished or undrained tasks issued under `generation`."""
        return sum(1 for t in self._tasks if t.generation == generation)

    def issue(self, fn: Callable, *args, generation: int, on_result: Callable[[Any], Any],
              label: str = "") -> RemoteTask:
        task = RemoteTask(self._executor.submit(fn, *args), generation, on_result, label)
        self._tasks.append(task)
        logger.debug(f"Issued {label or fn.__name__} (generation {generation})")
        return task

    def drain(self, wait: bool = False, timeout: Optional[float] = None) -> int:
        """
        Run the continuations of finished tasks, in completion order of this call.
        With `wait`, block until every task issued so far has finished.
        A task that failed re-raises its exception here; remaining tasks stay queued.
        """
        if wait and self._tasks:
            concurrent.futures.wait([t.future for t in self._tasks], timeout=timeout)

        finished = [t for t in self._tasks if t.done]
        ran = 0
        for task in finished:
            self._tasks.remove(task)
            result = task.future.result()
            task.on_result(result)
            ran += 1
        return ran

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._tasks.clear()
