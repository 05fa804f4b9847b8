"""
Module: compositor.compositor

Purpose:
    Hide-then-overlay compositing of user content over a frozen layout.

Key Classes:
    - LayoutCompositor: One full pass per composite() call
    - CompositorState: IDLE -> LAYOUT_LOADED -> SLOTS_HIDDEN -> CONTENT_OVERLAID
    - CompositeResult: Surface plus what was hidden, overlaid and reported
    - SlotIssue / IssueKind: Non-fatal per-slot problems of a pass
    - ResolutionError: A slot's source element is missing from the layout

Dependencies:
    - compositor.renderer.LayoutRenderer: Base render
    - compositor.overlay: Text and image overlays
    - fitting.text_fitter.TextFitter: Text fitting
    - media.loader.MediaLoader: Replacement image decoding

Used By:
    - compositor.session.ContentSession

Pass order is strict:
    1. Load     - install the snapshot as authored
    2. Hide     - resolve each slot with a value; mark its element not drawn
    3. Render   - unmodified base render with the hidden set
    4. Overlay  - draw each value into its slot box
Rendering-time problems never abort a pass; the affected slot keeps its
authored content and a SlotIssue is recorded.
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from PIL import Image

from ..core.models.elements import LayoutSnapshot
from ..core.models.slots import Slot, SlotKind
from ..fitting.text_fitter import FitResult, TextFitter
from ..media.fonts import FontResolver, default_resolver
from ..media.loader import DecodedMedia, DecodeError, MediaLoader, MediaRejectedError, check_constraints
from .config import CompositorConfig
from .overlay import overlay_image, overlay_text
from .renderer import LayoutRenderer

logger = logging.getLogger(__name__)


class CompositorState(str, Enum):
    """Stage of the current compositing pass."""
    IDLE = "idle"
    LAYOUT_LOADED = "layout_loaded"
    SLOTS_HIDDEN = "slots_hidden"
    CONTENT_OVERLAID = "content_overlaid"

    def __str__(self) -> str:
        return self.value


class IssueKind(str, Enum):
    """Kind of non-fatal slot problem."""
    RESOLUTION = "resolution"        # Source element not in the layout
    DECODE = "decode"                # Replacement image failed to decode
    REJECTED = "rejected"            # Replacement image violates constraints
    INVALID_VALUE = "invalid_value"  # Value of the wrong type for the slot
    OVERFLOW = "overflow"            # Text overflows at the minimum size

    def __str__(self) -> str:
        return self.value


class ResolutionError(Exception):
    """A slot's source element cannot be found in the layout snapshot."""

    def __init__(self, slot_id: str, persistent_id: str, layout_id: str = ""):
        super().__init__(
            f"Slot {slot_id}: element {persistent_id!r} not found in layout {layout_id!r}"
        )
        self.slot_id = slot_id
        self.persistent_id = persistent_id
        self.layout_id = layout_id


@dataclass(frozen=True, slots=True)
class SlotIssue:
    """A problem with one slot during a pass."""

    slot_id: str
    kind: IssueKind
    message: str


@dataclass(frozen=True)
class CompositeResult:
    """
    Outcome of one compositing pass.

    Attributes:
        surface: Composited RGBA image
        hidden_element_ids: Ephemeral ids of elements hidden this pass
        overlaid_slot_ids: Slots whose value was drawn, in draw order
        fit_results: TextFitter results per text slot id
        issues: Non-fatal problems, in the order found
        layout_id: Layout the pass rendered
    """

    surface: Image.Image
    hidden_element_ids: FrozenSet[str] = frozenset()
    overlaid_slot_ids: Tuple[str, ...] = ()
    fit_results: Dict[str, FitResult] = field(default_factory=dict)
    issues: Tuple[SlotIssue, ...] = ()
    layout_id: str = ""

    def issues_for(self, slot_id: str) -> List[SlotIssue]:
        return [i for i in self.issues if i.slot_id == slot_id]


@dataclass(frozen=True)
class _Prepared:
    """A slot whose element is hidden, with its ready-to-draw value."""

    slot: Slot
    value: Any


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (bytes, bytearray)):
        return len(value) > 0
    return True


class LayoutCompositor:
    """
    Composites slot values over a frozen layout.

    Passes are serialised; the latest surface is available synchronously
    through the surface property.

    Example:
        >>> compositor = LayoutCompositor(renderer, TextFitter(), loader)
        >>> result = compositor.composite(layout, slots, {slot.slot_id: "Summer sale"})
        >>> slot.slot_id in result.overlaid_slot_ids
        True
    """

    def __init__(
        self,
        renderer: LayoutRenderer,
        fitter: TextFitter,
        media: MediaLoader,
        config: Optional[CompositorConfig] = None,
    ):
        self._renderer = renderer
        self._fitter = fitter
        self._media = media
        self._config = config or CompositorConfig()
        self._lock = threading.RLock()
        self._state = CompositorState.IDLE
        self._transitions: List[CompositorState] = []
        self._layout: Optional[LayoutSnapshot] = None
        self._result: Optional[CompositeResult] = None

        self._overlay_handlers: Dict[SlotKind, Callable[[Image.Image, _Prepared, Dict[str, FitResult], List[SlotIssue]], None]] = {
            SlotKind.TEXT: self._overlay_text,
            SlotKind.IMAGE: self._overlay_image,
        }

    @classmethod
    def from_config(
        cls,
        config: Optional[CompositorConfig] = None,
        *,
        media: Optional[MediaLoader] = None,
        fonts: Optional[FontResolver] = None,
    ) -> LayoutCompositor:
        """
        Build a compositor and its collaborators from one configuration.

        A MediaLoader with config.media_workers threads is created unless
        one is given; the renderer and fitter share the font resolver.
        """
        config = config or CompositorConfig()
        fonts = fonts or default_resolver()
        media = media or MediaLoader(max_workers=config.media_workers)
        renderer = LayoutRenderer(
            media, fonts,
            media_timeout=config.media_timeout_seconds,
            baseline_ratio=config.baseline_ratio,
        )
        return cls(renderer, TextFitter(fonts), media, config)

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def media(self) -> MediaLoader:
        return self._media

    @property
    def state(self) -> CompositorState:
        return self._state

    @property
    def last_transitions(self) -> List[CompositorState]:
        """States entered by the most recent pass, in order."""
        return list(self._transitions)

    @property
    def layout(self) -> Optional[LayoutSnapshot]:
        return self._layout

    @property
    def surface(self) -> Optional[Image.Image]:
        """Surface of the latest pass (None before the first pass)."""
        return self._result.surface if self._result else None

    @property
    def last_result(self) -> Optional[CompositeResult]:
        return self._result

    # ─────────────────────────────────────────────────────────────────────────
    # Pass
    # ─────────────────────────────────────────────────────────────────────────

    def composite(
        self,
        layout: LayoutSnapshot,
        slots: Iterable[Slot],
        values: Mapping[str, Any],
    ) -> CompositeResult:
        """
        Run one full pass.

        Args:
            layout: Snapshot to draw (never mutated)
            slots: Slots of this layout instance
            values: slot_id -> text or image reference

        Returns:
            CompositeResult of this pass
        """
        with self._lock:
            self._transitions = []
            self._enter(CompositorState.IDLE)
            issues: List[SlotIssue] = []

            self._layout = layout
            self._enter(CompositorState.LAYOUT_LOADED)

            prepared, hidden = self._hide(layout, list(slots), values, issues)
            self._enter(CompositorState.SLOTS_HIDDEN)

            surface = self._renderer.render(layout, hidden)

            fit_results: Dict[str, FitResult] = {}
            overlaid: List[str] = []
            for item in prepared:
                handler = self._overlay_handlers[item.slot.kind]
                handler(surface, item, fit_results, issues)
                overlaid.append(item.slot.slot_id)
            self._enter(CompositorState.CONTENT_OVERLAID)

            result = CompositeResult(
                surface=surface,
                hidden_element_ids=frozenset(hidden),
                overlaid_slot_ids=tuple(overlaid),
                fit_results=fit_results,
                issues=tuple(issues),
                layout_id=layout.layout_id,
            )
            self._result = result

        logger.info(
            f"Composited layout {layout.layout_id!r}: {len(overlaid)} overlaid, "
            f"{len(hidden)} hidden, {len(issues)} issues"
        )
        return result

    def _enter(self, state: CompositorState) -> None:
        self._state = state
        self._transitions.append(state)

    # ─────────────────────────────────────────────────────────────────────────
    # Hide
    # ─────────────────────────────────────────────────────────────────────────

    def _hide(
        self,
        layout: LayoutSnapshot,
        slots: List[Slot],
        values: Mapping[str, Any],
        issues: List[SlotIssue],
    ) -> Tuple[List[_Prepared], set]:
        prepared: List[_Prepared] = []
        hidden: set = set()

        for slot in slots:
            value = values.get(slot.slot_id)
            if not _has_value(value):
                continue

            element = layout.find_by_persistent_id(slot.source_persistent_id)
            if element is None:
                error = ResolutionError(slot.slot_id, slot.source_persistent_id, layout.layout_id)
                logger.warning(str(error))
                issues.append(SlotIssue(slot.slot_id, IssueKind.RESOLUTION, str(error)))
                continue

            ready = self._prepare_value(slot, value, issues)
            if ready is None:
                continue

            hidden.add(element.id)
            prepared.append(_Prepared(slot, ready))
            logger.debug(f"Hid element {element.persistent_id} for slot {slot.slot_id}")

        return prepared, hidden

    def _prepare_value(self, slot: Slot, value: Any, issues: List[SlotIssue]) -> Any:
        """Value ready to draw, or None to keep the default element."""
        if slot.kind == SlotKind.TEXT:
            if not isinstance(value, str):
                issues.append(SlotIssue(
                    slot.slot_id, IssueKind.INVALID_VALUE,
                    f"text slot expects a string, got {type(value).__name__}",
                ))
                return None
            if not value[: slot.constraints.max_characters].strip():
                # Blank once truncated
                return None
            return value

        try:
            media = self._media.get(value, timeout=self._config.media_timeout_seconds)
            check_constraints(media, slot.constraints)
        except MediaRejectedError as e:
            logger.warning(f"Slot {slot.slot_id}: image rejected: {e.reason}")
            issues.append(SlotIssue(slot.slot_id, IssueKind.REJECTED, e.reason))
            return None
        except DecodeError as e:
            logger.warning(f"Slot {slot.slot_id}: image failed to decode: {e.reason}")
            issues.append(SlotIssue(slot.slot_id, IssueKind.DECODE, e.reason))
            return None
        except concurrent.futures.TimeoutError:
            reason = f"decode exceeded {self._config.media_timeout_seconds:g}s"
            logger.warning(f"Slot {slot.slot_id}: {reason}")
            issues.append(SlotIssue(slot.slot_id, IssueKind.DECODE, reason))
            return None
        except (TypeError, AttributeError) as e:
            issues.append(SlotIssue(slot.slot_id, IssueKind.INVALID_VALUE, f"not an image reference: {e}"))
            return None
        return media

    # ─────────────────────────────────────────────────────────────────────────
    # Overlay
    # ─────────────────────────────────────────────────────────────────────────

    def _overlay_text(
        self,
        surface: Image.Image,
        item: _Prepared,
        fit_results: Dict[str, FitResult],
        issues: List[SlotIssue],
    ) -> None:
        slot = item.slot
        fit = self._fitter.fit(item.value, slot.bounding_box, slot.constraints, slot.styling)
        fit_results[slot.slot_id] = fit
        if fit.overflow:
            message = f"text overflows at {fit.font_size}px ({fit.total_height:g}px > {slot.bounding_box.height:g}px)"
            logger.warning(f"Slot {slot.slot_id}: {message}")
            issues.append(SlotIssue(slot.slot_id, IssueKind.OVERFLOW, message))
        overlay_text(
            surface, slot, fit, self._fitter.fonts,
            clip=self._config.clip_overlay,
            baseline_ratio=self._config.baseline_ratio,
        )

    def _overlay_image(
        self,
        surface: Image.Image,
        item: _Prepared,
        fit_results: Dict[str, FitResult],
        issues: List[SlotIssue],
    ) -> None:
        media: DecodedMedia = item.value
        overlay_image(surface, item.slot, media, clip=self._config.clip_overlay)
