"""
Module: compositor.session

Purpose:
    One end-user editing session over one layout instance: owns the
    ephemeral slot values and re-composites (debounced) whenever they change.

Key Classes:
    - ContentSession: set_value / clear_value / switch_layout / flush

Dependencies:
    - compositor.compositor.LayoutCompositor
    - compositor.scheduler.DebouncedScheduler

Used By:
    - Consumer integrations (form widgets, previews, exporters)

Values are never persisted. Text values are strings; image values are a
path, data: URL, raw bytes or a PIL image.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from PIL import Image

from ..core.models.elements import LayoutSnapshot
from ..core.models.slots import Slot
from .compositor import CompositeResult, LayoutCompositor
from .config import CompositorConfig
from .scheduler import DebouncedScheduler

logger = logging.getLogger(__name__)


class ContentSession:
    """
    Debounced compositing session.

    Usage:
        with ContentSession(compositor, layout, registry.get_all_slots()) as session:
            session.load()
            session.set_value(slot.slot_id, "Hello")   # pass runs 300 ms later
            session.flush()                            # or force it now
            preview = session.surface

    Attributes:
        on_composite: Optional callback receiving each CompositeResult
    """

    def __init__(
        self,
        compositor: LayoutCompositor,
        layout: LayoutSnapshot,
        slots: Iterable[Slot],
        *,
        config: Optional[CompositorConfig] = None,
        on_composite: Optional[Callable[[CompositeResult], None]] = None,
    ):
        self._compositor = compositor
        self._layout = layout
        self._slots: List[Slot] = list(slots)
        self._values: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._result: Optional[CompositeResult] = None
        self.on_composite = on_composite
        config = config or CompositorConfig()
        self._scheduler = DebouncedScheduler(config.debounce_seconds, self._run_pass)

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def layout(self) -> LayoutSnapshot:
        return self._layout

    @property
    def slots(self) -> List[Slot]:
        return list(self._slots)

    @property
    def values(self) -> Dict[str, Any]:
        """Copy of the current slot values."""
        with self._lock:
            return dict(self._values)

    @property
    def scheduler(self) -> DebouncedScheduler:
        return self._scheduler

    @property
    def last_result(self) -> Optional[CompositeResult]:
        return self._result

    @property
    def surface(self) -> Optional[Image.Image]:
        """Latest composited surface (None before the first pass)."""
        return self._result.surface if self._result else None

    # ─────────────────────────────────────────────────────────────────────────
    # Values
    # ─────────────────────────────────────────────────────────────────────────

    def set_value(self, slot_id: str, value: Any) -> None:
        """
        Set a slot value and schedule a pass.

        Raises:
            KeyError: If slot_id is not a slot of this session
        """
        self._require_slot(slot_id)
        with self._lock:
            self._values[slot_id] = value
        logger.debug(f"Value changed for {slot_id}")
        self._scheduler.schedule()

    def set_values(self, values: Mapping[str, Any]) -> None:
        """Set several values with a single scheduled pass."""
        for slot_id in values:
            self._require_slot(slot_id)
        with self._lock:
            self._values.update(values)
        self._scheduler.schedule()

    def clear_value(self, slot_id: str) -> None:
        """Clear a slot value; its authored content returns on the next pass."""
        with self._lock:
            removed = self._values.pop(slot_id, None)
        if removed is not None:
            self._scheduler.schedule()

    def clear_values(self) -> None:
        with self._lock:
            had_values = bool(self._values)
            self._values.clear()
        if had_values:
            self._scheduler.schedule()

    # ─────────────────────────────────────────────────────────────────────────
    # Passes
    # ─────────────────────────────────────────────────────────────────────────

    def load(self) -> CompositeResult:
        """Run the initial pass immediately."""
        self._scheduler.cancel()
        self._run_pass()
        return self._result

    def switch_layout(self, layout: LayoutSnapshot, slots: Optional[Iterable[Slot]] = None) -> CompositeResult:
        """
        Switch to another layout (page) and composite it immediately.

        Values are kept; slot ids are namespaced, so values of other
        layouts never apply here.
        """
        self._scheduler.cancel()
        self._layout = layout
        if slots is not None:
            self._slots = list(slots)
        logger.info(f"Switched to layout {layout.layout_id!r}")
        self._run_pass()
        return self._result

    def flush(self) -> Optional[CompositeResult]:
        """Run a pending pass now; returns the latest result."""
        self._scheduler.flush()
        return self._result

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the scheduled pass (if any) to finish."""
        return self._scheduler.wait(timeout)

    def close(self) -> None:
        """Cancel any pending pass."""
        self._scheduler.cancel()

    def __enter__(self) -> ContentSession:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _run_pass(self) -> None:
        values = self.values
        result = self._compositor.composite(self._layout, self._slots, values)
        self._result = result
        if self.on_composite is not None:
            self.on_composite(result)

    def _require_slot(self, slot_id: str) -> None:
        if not any(s.slot_id == slot_id for s in self._slots):
            raise KeyError(f"Unknown slot {slot_id!r}")
