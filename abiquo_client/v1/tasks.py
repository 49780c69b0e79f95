"""
abiquo_client.v1.tasks - Task completion polling
=================================================

Blocking sleep-then-poll loop over an asynchronous Abiquo task.

- The first wait happens before the first re-check; the initial snapshot
  is never reported as complete without at least one poll.
- A terminal state ends the loop immediately.
- Reaching the deadline is not an error: the last snapshot is returned and
  the caller inspects ``task.is_terminal``.
"""

from __future__ import annotations

from typing import Callable, Optional
import logging
import time

from abiquo_client.core.errors import PreconditionViolation
from abiquo_client.v1 import relations
from abiquo_client.v1.model import Link, Task

logger = logging.getLogger("abiquo_client.tasks")


class TaskPoller:
    """
    Poll a task through its ``self`` link until it is terminal or time runs out.

    Parameters
    ----------
    fetch : callable
        ``fetch(self_link) -> Task``; takes the session lock itself, so no
        lock is held while sleeping
    sleep : callable, optional
        Sleep function taking seconds (``time.sleep``)
    clock : callable, optional
        Monotonic clock in seconds (``time.monotonic``)
    """

    def __init__(
        self,
        fetch: Callable[[Link], Task],
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.fetch = fetch
        self.sleep = sleep
        self.clock = clock

    @staticmethod
    def _validate(task: Optional[Task], poll_interval_ms: int, timeout_ms: int) -> Link:
        if task is None:
            raise PreconditionViolation("task must not be None")
        if not task.task_id or not task.task_id.strip():
            raise PreconditionViolation("task has no task_id")
        if poll_interval_ms is None or poll_interval_ms <= 0:
            raise PreconditionViolation(f"poll_interval_ms must be > 0, got {poll_interval_ms!r}")
        if timeout_ms is None or timeout_ms <= 0:
            raise PreconditionViolation(f"timeout_ms must be > 0, got {timeout_ms!r}")
        return task.require_link(relations.SELF)

    def wait_for_completion(self, task: Task, poll_interval_ms: int, timeout_ms: int) -> Task:
        """
        Block until ``task`` reaches a terminal state or ``timeout_ms`` elapses.

        Parameters
        ----------
        task : Task
            Snapshot returned by a state-changing call
        poll_interval_ms : int
            Wait between two polls, clipped to the time left before the deadline
        timeout_ms : int
            Overall wall-clock bound

        Returns
        -------
        Task
            The terminal snapshot, or the last fetched snapshot on timeout
        """
        self_link = self._validate(task, poll_interval_ms, timeout_ms)
        logger.debug(
            "Waiting for task %s (poll %sms, timeout %sms)",
            task.task_id, poll_interval_ms, timeout_ms,
        )

        interval = poll_interval_ms / 1000.0
        deadline = self.clock() + timeout_ms / 1000.0
        current = task
        polls = 0

        while True:
            remaining = deadline - self.clock()
            if remaining <= 0:
                logger.warning(
                    "Task %s not finished after %sms (%d polls, state %s)",
                    task.task_id, timeout_ms, polls, current.state.value,
                )
                return current

            self.sleep(min(interval, remaining))
            current = self.fetch(self_link)
            polls += 1

            if current.is_terminal:
                logger.info(
                    "Task %s completed with state %s after %d polls",
                    task.task_id, current.state.value, polls,
                )
                return current
