"""
Module: compositor.renderer

Purpose:
    The single rendering path for authored layouts. Draws a LayoutSnapshot
    to an RGBA surface, skipping any element the caller marks hidden.

Key Classes:
    - LayoutRenderer: render(layout, hidden_ids)

Dependencies:
    - PIL.Image, PIL.ImageDraw
    - placement.text_layout: Text wrap and baselines
    - placement.image_placer: Media placement
    - media.loader.MediaLoader: Decoded media

Used By:
    - compositor.compositor: Base render of every pass
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import AbstractSet, Optional

from PIL import Image, ImageDraw

from ..core.models.elements import ContentElement, ElementKind, LayoutSnapshot
from ..core.models.geometry import BoundingBox
from ..media.fonts import FontResolver, default_resolver
from ..media.loader import DecodedMedia, DecodeError, MediaLoader
from ..placement.image_placer import cover, draw_media, place
from ..placement.text_layout import BASELINE_RATIO, draw_lines, layout_text

logger = logging.getLogger(__name__)


class LayoutRenderer:
    """
    Draws frozen layouts.

    The renderer never mutates the snapshot; hiding is expressed through
    the hidden_ids argument of a single render() call.

    Example:
        >>> renderer = LayoutRenderer(loader)
        >>> surface = renderer.render(layout, hidden_ids={"el-1"})
        >>> surface.mode
        'RGBA'
    """

    def __init__(
        self,
        media: MediaLoader,
        fonts: Optional[FontResolver] = None,
        *,
        media_timeout: float = 5.0,
        baseline_ratio: float = BASELINE_RATIO,
    ):
        self._media = media
        self._fonts = fonts or default_resolver()
        self._media_timeout = media_timeout
        self._baseline_ratio = baseline_ratio

    @property
    def fonts(self) -> FontResolver:
        return self._fonts

    def render(self, layout: LayoutSnapshot, hidden_ids: AbstractSet[str] = frozenset()) -> Image.Image:
        """
        Render a layout.

        Args:
            layout: Snapshot to draw
            hidden_ids: Ephemeral ids of elements not to draw this time

        Returns:
            New RGBA surface of the canvas size
        """
        surface = Image.new("RGBA", layout.size, layout.background_color)
        self._draw_background(surface, layout)

        drawn = 0
        for element in layout.elements:
            if element.id in hidden_ids:
                logger.debug(f"Skipping hidden element {element.persistent_id}")
                continue
            self.draw_element(surface, element)
            drawn += 1

        logger.debug(f"Rendered layout {layout.layout_id!r}: {drawn} drawn, {len(hidden_ids)} hidden")
        return surface

    def draw_element(self, surface: Image.Image, element: ContentElement) -> None:
        """Draw one element onto the surface in place."""
        if element.kind == ElementKind.TEXT:
            self._draw_text(surface, element)
        elif element.kind == ElementKind.MEDIA:
            self._draw_media(surface, element)
        elif element.fill_color:
            ImageDraw.Draw(surface).rectangle(_inclusive(element.container), fill=element.fill_color)

    def _draw_background(self, surface: Image.Image, layout: LayoutSnapshot) -> None:
        if not layout.background_reference:
            return
        media = self._decoded(layout.background_reference, "background")
        if media is None:
            return
        canvas_box = BoundingBox(0, 0, layout.width, layout.height)
        draw_media(surface, media.image, cover(media.size, canvas_box))

    def _draw_text(self, surface: Image.Image, element: ContentElement) -> None:
        payload = element.text
        block = layout_text(
            payload.text, element.container, payload.typography, self._fonts,
            baseline_ratio=self._baseline_ratio,
        )
        if not block.is_empty:
            draw_lines(ImageDraw.Draw(surface), block)

    def _draw_media(self, surface: Image.Image, element: ContentElement) -> None:
        payload = element.media
        media = self._decoded(payload.reference, element.persistent_id)
        if media is None:
            return
        placement = place(
            media.size,
            element.container.inset(payload.padding),
            payload.fill_mode,
            scale=payload.scale,
            h_align=payload.align_h,
            v_align=payload.align_v,
        )
        # Not clipped: scaled media may overflow its container
        draw_media(surface, media.image, placement, rotation=payload.rotation)

    def _decoded(self, reference: str, owner: str) -> Optional[DecodedMedia]:
        try:
            return self._media.get(reference, timeout=self._media_timeout)
        except DecodeError as e:
            logger.warning(f"Skipping media of {owner}: {e.reason}")
        except concurrent.futures.TimeoutError:
            logger.warning(f"Skipping media of {owner}: decode exceeded {self._media_timeout:g}s")
        return None


def _inclusive(box: BoundingBox) -> tuple[int, int, int, int]:
    """PIL rectangle coordinates (right/bottom inclusive) of a box."""
    left, top, right, bottom = box.to_pixels()
    return (left, top, max(left, right - 1), max(top, bottom - 1))
