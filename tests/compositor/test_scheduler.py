"""
Tests for DebouncedScheduler

Test Coverage:
- A burst of schedule() calls fires the callback once
- cancel() / flush() / wait()
- Callback failures are recorded and do not stop the scheduler
"""

import threading

import pytest

from slotframe.compositor import DebouncedScheduler


class Counter:
    def __init__(self):
        self.calls = 0
        self.lock = threading.Lock()

    def __call__(self):
        with self.lock:
            self.calls += 1


def test_burst_fires_once():
    # Arrange
    counter = Counter()
    scheduler = DebouncedScheduler(0.05, counter)

    # Act
    for _ in range(5):
        scheduler.schedule()

    # Assert
    assert scheduler.wait(2.0)
    assert counter.calls == 1
    assert scheduler.fire_count == 1
    assert scheduler.pending is False


def test_schedule_after_quiet_period_fires_again():
    counter = Counter()
    scheduler = DebouncedScheduler(0.01, counter)

    scheduler.schedule()
    scheduler.wait(2.0)
    scheduler.schedule()
    scheduler.wait(2.0)

    assert counter.calls == 2


def test_cancel_drops_pending_pass():
    counter = Counter()
    scheduler = DebouncedScheduler(0.2, counter)

    scheduler.schedule()
    assert scheduler.cancel() is True
    assert scheduler.cancel() is False

    assert scheduler.wait(1.0)
    assert counter.calls == 0


def test_flush_runs_pending_pass_synchronously():
    counter = Counter()
    scheduler = DebouncedScheduler(10.0, counter)

    scheduler.schedule()
    assert scheduler.flush() is True

    assert counter.calls == 1
    assert scheduler.pending is False
    assert scheduler.flush() is False
    assert scheduler.wait(0.1)


def test_wait_without_pending_returns_immediately():
    assert DebouncedScheduler(0.1, Counter()).wait(0.0)


def test_failing_callback_is_recorded(caplog):
    # Arrange
    def explode():
        raise RuntimeError("boom")

    scheduler = DebouncedScheduler(0.0, explode)

    # Act
    scheduler.schedule()
    scheduler.wait(2.0)

    # Assert
    assert isinstance(scheduler.last_error, RuntimeError)
    assert scheduler.fire_count == 0
    assert "pass failed" in caplog.text

    scheduler.schedule()
    assert scheduler.wait(2.0)


def test_negative_delay_rejected():
    with pytest.raises(ValueError, match="delay must be >= 0"):
        DebouncedScheduler(-0.1, Counter())
