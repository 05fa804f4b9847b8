"""
Module: capture.bounds_capture

Purpose:
    Measure the tight rectangle actually occupied by an element's rendered
    content, which is usually smaller than its container (text) and may be
    larger than it (media drawn with scale > 1).

Key Classes:
    - BoundingBoxCapture: capture() / capture_when_ready()
    - CapturedBounds: Tight box plus optional overflow
    - CaptureTimingError / MediaNotReadyError: Capture attempted too early

Dependencies:
    - PIL.Image, PIL.ImageDraw: Scratch surfaces for ink measurement
    - placement.text_layout: Same wrap and line placement as the renderer
    - placement.image_placer: Same placement arithmetic as the renderer
    - media.loader.MediaLoader: Natural media sizes

Used By:
    - registry.SlotRegistry: Slot bounding boxes

Text bounds are measured from ink, not from font metrics: each line is
drawn onto a scratch surface with the renderer's own wrap and baseline
positions, and the surface's non-zero extent is read back. Media bounds
are computed, not rasterised, since placement is pure arithmetic.
"""

from __future__ import annotations

import concurrent.futures
import logging
import math
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageDraw

from ..core.models.elements import ContentElement, ElementKind
from ..core.models.geometry import BoundingBox, Overflow
from ..media.fonts import FontResolver, default_resolver
from ..media.loader import DecodeError, MediaLoader
from ..placement.image_placer import place, rotated_bounds
from ..placement.text_layout import BASELINE_RATIO, PlacedLine, layout_text

logger = logging.getLogger(__name__)

# Scratch surface margin around a line's layout box, in pixels
SCRATCH_MARGIN = 4


class CaptureTimingError(Exception):
    """Capture ran before the element's content could be measured."""

    def __init__(self, element_id: str, reason: str):
        super().__init__(f"Cannot capture bounds of {element_id}: {reason}")
        self.element_id = element_id
        self.reason = reason


class MediaNotReadyError(CaptureTimingError):
    """Media decode is still pending; retry once it has finished."""


@dataclass(frozen=True, slots=True)
class CapturedBounds:
    """
    Tight bounds of an element's rendered content.

    Attributes:
        box: Tight rectangle in canvas coordinates
        overflow: Amount drawn past the container, if any
    """

    box: BoundingBox
    overflow: Optional[Overflow] = None


class BoundingBoxCapture:
    """
    Tight bounding-box measurement for layout elements.

    Example:
        >>> capture = BoundingBoxCapture(loader)
        >>> bounds = capture.capture(title_element)
        >>> title_element.container.contains_box(bounds.box)
        True
    """

    def __init__(
        self,
        media: MediaLoader,
        fonts: Optional[FontResolver] = None,
        baseline_ratio: float = BASELINE_RATIO,
    ):
        self._media = media
        self._fonts = fonts or default_resolver()
        self._baseline_ratio = baseline_ratio

    @property
    def media(self) -> MediaLoader:
        return self._media

    def capture(self, element: ContentElement) -> Optional[CapturedBounds]:
        """
        Measure an element.

        Returns:
            CapturedBounds, or None for an element with nothing drawn
            (empty element, blank text)

        Raises:
            MediaNotReadyError: Media natural size not known yet
            CaptureTimingError: Media failed to decode
        """
        if element.kind == ElementKind.TEXT:
            bounds = self._capture_text(element)
        elif element.kind == ElementKind.MEDIA:
            bounds = self._capture_media(element)
        else:
            bounds = None
        logger.debug(f"Captured {element.persistent_id}: {bounds.box if bounds else None}")
        return bounds

    def capture_when_ready(self, element: ContentElement, timeout: float = 5.0) -> Optional[CapturedBounds]:
        """
        Measure an element, waiting up to timeout seconds for its media.

        Raises:
            CaptureTimingError: Media still pending after timeout, or
                failed to decode
        """
        if element.kind == ElementKind.MEDIA:
            future = self._media.request(element.media.reference)
            try:
                future.result(timeout=timeout)
            except concurrent.futures.TimeoutError as e:
                raise MediaNotReadyError(
                    element.id, f"media still decoding after {timeout:g}s"
                ) from e
            except DecodeError as e:
                raise CaptureTimingError(element.id, e.reason) from e
        return self.capture(element)

    @staticmethod
    def content_area(element: ContentElement) -> BoundingBox:
        """Container minus the element's padding."""
        if element.kind == ElementKind.TEXT:
            return element.container.inset(element.text.typography.padding)
        if element.kind == ElementKind.MEDIA:
            return element.container.inset(element.media.padding)
        return element.container

    # ─────────────────────────────────────────────────────────────────────────
    # Text
    # ─────────────────────────────────────────────────────────────────────────

    def _capture_text(self, element: ContentElement) -> Optional[CapturedBounds]:
        payload = element.text
        block = layout_text(
            payload.text, element.container, payload.typography, self._fonts,
            baseline_ratio=self._baseline_ratio,
        )
        if block.is_empty:
            return None

        boxes = [self._line_ink(line, block.font) for line in block.lines]
        box = BoundingBox.union_all(b for b in boxes if b is not None)
        if box is None:
            # Only whitespace-like glyphs were drawn
            return None
        return CapturedBounds(box=box, overflow=box.overflow_beyond(element.container))

    def _line_ink(self, line: PlacedLine, font) -> Optional[BoundingBox]:
        """Draw one line on a scratch surface and read back its ink extent."""
        left, top, right, bottom = font.getbbox(line.text, anchor=line.anchor)
        origin_x = math.floor(line.x + left) - SCRATCH_MARGIN
        origin_y = math.floor(line.baseline + top) - SCRATCH_MARGIN
        width = math.ceil(right - left) + SCRATCH_MARGIN * 2 + 1
        height = math.ceil(bottom - top) + SCRATCH_MARGIN * 2 + 1

        # Integer translation keeps sub-pixel glyph positioning identical
        scratch = Image.new("L", (width, height), 0)
        ImageDraw.Draw(scratch).text(
            (line.x - origin_x, line.baseline - origin_y),
            line.text,
            fill=255,
            font=font,
            anchor=line.anchor,
        )
        ink = scratch.getbbox()
        if ink is None:
            return None
        ink_left, ink_top, ink_right, ink_bottom = ink
        return BoundingBox.from_edges(
            ink_left + origin_x,
            ink_top + origin_y,
            ink_right + origin_x,
            ink_bottom + origin_y,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Media
    # ─────────────────────────────────────────────────────────────────────────

    def _capture_media(self, element: ContentElement) -> CapturedBounds:
        media = element.media
        size = self._media.natural_size(media.reference)
        if size is None:
            future = self._media.request(media.reference)
            if future.done():
                error = future.exception()
                raise CaptureTimingError(element.id, f"media failed to decode: {error}")
            raise MediaNotReadyError(element.id, f"media {media.reference!r} not decoded yet")

        placement = place(
            size,
            self.content_area(element),
            media.fill_mode,
            scale=media.scale,
            h_align=media.align_h,
            v_align=media.align_v,
        )
        drawn = rotated_bounds(placement.dest, media.rotation)
        overflow = drawn.overflow_beyond(element.container)
        if overflow is not None:
            logger.debug(f"Media {element.persistent_id} overflows container: {overflow}")
        return CapturedBounds(box=drawn, overflow=overflow)
