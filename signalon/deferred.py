"""Single-threaded work queue for tasks that must run after a dispatch.

The dispatcher drains the queue once the outermost emission has finished,
so tasks scheduled by subscribers (e.g. one-shot detachment) never touch a
subscriber sequence while it is being iterated.
"""

from collections import deque

from loguru import logger

from signalon._types import Task
from signalon.utils import callable_name

log = logger.bind(source=__name__)


class DeferredQueue:
    def __init__(self) -> None:
        self._tasks: deque[Task] = deque()

    def __len__(self) -> int:
        return len(self._tasks)

    def schedule(self, task: Task) -> None:
        self._tasks.append(task)

    def run_pending(self) -> int:
        """Run queued tasks in FIFO order, including ones queued meanwhile.

        Returns:
            Number of tasks that ran.
        """
        ran = 0
        while self._tasks:
            task = self._tasks.popleft()
            log.debug("Running deferred task {}", callable_name(task))
            task()
            ran += 1
        return ran

    def clear(self) -> None:
        self._tasks.clear()
