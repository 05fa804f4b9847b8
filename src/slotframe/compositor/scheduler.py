"""
Module: compositor.scheduler

Purpose:
    Debounced, cancellable scheduling of compositing passes. Each edit
    cancels the pending pass and schedules a fresh one, so only the last
    edit of a burst triggers a pass.

Key Classes:
    - DebouncedScheduler: At most one pending threading.Timer

Dependencies:
    - threading (std)

Used By:
    - compositor.session.ContentSession
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DebouncedScheduler:
    """
    Trailing-edge debounce around a callback.

    Usage:
        scheduler = DebouncedScheduler(0.3, run_pass)
        scheduler.schedule()   # edit 1
        scheduler.schedule()   # edit 2 cancels edit 1's pass
        scheduler.wait(1.0)    # run_pass called once

    Callbacks never overlap: a pass that fires while another is running
    waits for it to finish.
    """

    def __init__(self, delay: float, callback: Callable[[], None], name: str = "composite"):
        if delay < 0:
            raise ValueError(f"delay must be >= 0: {delay}")
        self.delay = delay
        self._callback = callback
        self._name = name
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._active = 0
        self._idle = threading.Event()
        self._idle.set()
        self.fire_count = 0
        self.last_error: Optional[BaseException] = None

    @property
    def pending(self) -> bool:
        """True while a pass is scheduled but has not started."""
        return self._timer is not None

    def schedule(self) -> None:
        """(Re)start the quiet period, cancelling any pending pass."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            timer.daemon = True
            timer.name = f"slotframe-{self._name}-{self._generation}"
            self._timer = timer
            self._idle.clear()
            timer.start()

    def cancel(self) -> bool:
        """Drop the pending pass. Returns True if one was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self._generation += 1
        self._set_idle_if_quiet()
        return True

    def flush(self) -> bool:
        """Run the pending pass now. Returns True if one was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self._generation += 1
            self._active += 1
        self._run()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until nothing is pending or running. False on timeout."""
        return self._idle.wait(timeout)

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                # Superseded by a later schedule() or a cancel()
                return
            self._timer = None
            self._active += 1
        self._run()

    def _run(self) -> None:
        """Run the callback; the caller has already counted this run as active."""
        try:
            with self._run_lock:
                try:
                    self._callback()
                    self.fire_count += 1
                except Exception as e:
                    self.last_error = e
                    logger.exception(f"Scheduled {self._name} pass failed: {e}")
        finally:
            with self._lock:
                self._active -= 1
            self._set_idle_if_quiet()

    def _set_idle_if_quiet(self) -> None:
        with self._lock:
            if self._timer is None and self._active == 0:
                self._idle.set()
