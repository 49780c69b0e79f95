"""
Tests for abiquo_client.v1.tasks.TaskPoller.
"""

import logging
import threading

import pytest
from unittest.mock import Mock

from abiquo_client.core.errors import PreconditionViolation, TransportError
from abiquo_client.v1.model import Task, TaskState
from abiquo_client.v1.tasks import TaskPoller

from conftest import make_task


class FakeClock:
    """Monotonic clock advanced only by sleeping."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _task(state="STARTED"):
    return Task.model_validate(make_task(state))


def _poller(fetch, clock):
    return TaskPoller(fetch, sleep=clock.sleep, clock=clock.clock)


class TestTaskPoller:
    """Tests for the sleep-then-poll loop."""

    def test_returns_terminal_snapshot(self):
        clock = FakeClock()
        fetch = Mock(side_effect=[_task("STARTED"), _task("FINISHED_SUCCESSFULLY")])
        task = _task("PENDING")

        result = _poller(fetch, clock).wait_for_completion(task, 1000, 10000)

        assert result.state == TaskState.FINISHED_SUCCESSFULLY
        assert fetch.call_count == 2
        assert clock.sleeps == [1.0, 1.0]
        fetch.assert_called_with(task.require_link("self"))

    def test_sleeps_before_first_poll(self):
        clock = FakeClock()
        fetch = Mock(return_value=_task("FINISHED_SUCCESSFULLY"))

        result = _poller(fetch, clock).wait_for_completion(_task("FINISHED_SUCCESSFULLY"), 500, 10000)

        assert result.is_terminal
        assert clock.sleeps == [0.5]
        assert fetch.call_count == 1

    @pytest.mark.parametrize("state", [
        "FINISHED_SUCCESSFULLY",
        "FINISHED_UNSUCCESSFULLY",
        "ABORTED",
        "CANCELLED",
        "ACK_ERROR",
    ])
    def test_every_terminal_state_stops_polling(self, state):
        clock = FakeClock()
        fetch = Mock(return_value=_task(state))

        result = _poller(fetch, clock).wait_for_completion(_task(), 1000, 60000)

        assert result.state == TaskState(state)
        assert fetch.call_count == 1

    def test_timeout_returns_last_snapshot(self, caplog):
        clock = FakeClock()
        fetch = Mock(side_effect=[_task("QUEUEING"), _task("STARTED"), _task("STARTED")])

        with caplog.at_level(logging.WARNING, logger="abiquo_client.tasks"):
            result = _poller(fetch, clock).wait_for_completion(_task("PENDING"), 1000, 2500)

        assert result.state == TaskState.STARTED
        assert not result.is_terminal
        assert fetch.call_count == 3
        assert "not finished" in caplog.text

    def test_sleep_clipped_to_deadline(self):
        clock = FakeClock()
        fetch = Mock(return_value=_task("STARTED"))

        _poller(fetch, clock).wait_for_completion(_task(), 1000, 2500)

        assert clock.sleeps == [1.0, 1.0, 0.5]
        assert clock.now == pytest.approx(2.5)

    def test_interval_longer_than_timeout(self):
        clock = FakeClock()
        fetch = Mock(return_value=_task("STARTED"))

        _poller(fetch, clock).wait_for_completion(_task(), 5000, 300)

        assert clock.sleeps == [pytest.approx(0.3)]
        assert fetch.call_count == 1

    def test_fetch_errors_propagate(self):
        clock = FakeClock()
        fetch = Mock(side_effect=TransportError(500, "boom", "https://abiquo.example.com/api/x"))

        with pytest.raises(TransportError):
            _poller(fetch, clock).wait_for_completion(_task(), 1000, 5000)

    def test_terminal_state_property(self):
        assert TaskState.ACK_ERROR.is_terminal
        assert not TaskState.QUEUEING.is_terminal
        assert not TaskState.PENDING.is_terminal
        assert not TaskState.STARTED.is_terminal


class TestTaskPollerPreconditions:
    """Precondition checks happen before any sleep or fetch."""

    def _check(self, task, interval=1000, timeout=1000):
        clock = FakeClock()
        fetch = Mock()
        with pytest.raises(PreconditionViolation):
            _poller(fetch, clock).wait_for_completion(task, interval, timeout)
        assert clock.sleeps == []
        fetch.assert_not_called()

    def test_none_task(self):
        self._check(None)

    def test_empty_task_id(self):
        data = make_task()
        data["taskId"] = ""
        self._check(Task.model_validate(data))

    def test_missing_self_link(self):
        data = make_task()
        data["links"] = []
        self._check(Task.model_validate(data))

    @pytest.mark.parametrize("interval, timeout", [(0, 1000), (-1, 1000), (1000, 0), (1000, -5)])
    def test_non_positive_durations(self, interval, timeout):
        self._check(_task(), interval, timeout)


class TestTaskPollerWithClient:
    """TaskPoller driven by a logged-in client's task fetch."""

    TASK_SUFFIX = "/cloud/virtualdatacenters/1/virtualappliances/2/virtualmachines/3/tasks/5b3c1f0e-task"

    def test_session_lock_free_while_sleeping(self, logged_in_client, fake_executor):
        fake_executor.add("GET", self.TASK_SUFFIX, make_task("STARTED"))
        fake_executor.add("GET", self.TASK_SUFFIX, make_task("FINISHED_SUCCESSFULLY"))
        clock = FakeClock()
        lock_free = []

        def sleeper(seconds):
            def try_acquire():
                got = logged_in_client.session.lock.acquire(blocking=False)
                if got:
                    logged_in_client.session.lock.release()
                lock_free.append(got)

            t = threading.Thread(target=try_acquire)
            t.start()
            t.join()
            clock.sleep(seconds)

        poller = TaskPoller(logged_in_client._fetch_task, sleep=sleeper, clock=clock.clock)
        result = poller.wait_for_completion(_task("PENDING"), 1000, 10000)

        assert result.state == TaskState.FINISHED_SUCCESSFULLY
        assert lock_free == [True, True]
        assert len(fake_executor.calls) == 2
        assert all(call["headers"]["Cookie"] == "auth=ABC123" for call in fake_executor.calls)
