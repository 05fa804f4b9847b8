"""
Module: compositor.overlay

Purpose:
    Draw user-supplied values into slot bounding boxes on top of a base
    render. Only the slot's locked styling is applied.

Key Functions:
    - overlay_text(): Fitted text, clipped to the slot box
    - overlay_image(): Cover / free placed image, clipped to the slot box
    - image_placement(): Placement of a replacement image in a slot

Dependencies:
    - PIL: Image drawing
    - placement.text_layout / placement.image_placer

Used By:
    - compositor.compositor: Overlay step of every pass
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from PIL import Image, ImageDraw

from ..core.models.geometry import BoundingBox
from ..core.models.slots import ImageConstraints, ImageFitMode, MediaStyling, Slot, TextConstraints, TextStyling
from ..fitting.text_fitter import FitResult
from ..media.fonts import FontResolver
from ..media.loader import DecodedMedia
from ..placement.image_placer import Placement, cover, draw_media, free
from ..placement.text_layout import BASELINE_RATIO, TextBlock, draw_lines, place_lines

logger = logging.getLogger(__name__)


def overlay_text(
    surface: Image.Image,
    slot: Slot,
    fit: FitResult,
    fonts: FontResolver,
    *,
    clip: bool = True,
    baseline_ratio: float = BASELINE_RATIO,
) -> None:
    """
    Draw fitted text into a text slot, in place.

    Args:
        surface: RGBA base render
        slot: Text slot
        fit: TextFitter.fit() result for the value
        fonts: Resolver shared with the fitter
        clip: Clip to the slot bounding box
    """
    constraints: TextConstraints = slot.constraints
    styling: TextStyling = slot.styling
    if not fit.lines:
        return

    font = fonts.resolve(styling.font_family, fit.font_size, styling.font_weight, styling.font_style)
    lines = place_lines(
        fit.lines,
        slot.bounding_box,
        fit.font_size,
        constraints.line_height,
        constraints.horizontal_align,
        constraints.vertical_align,
        baseline_ratio,
    )
    block = TextBlock(lines=lines, font=font, font_size=fit.font_size, color=styling.color)

    if not clip:
        draw_lines(ImageDraw.Draw(surface), block)
        return

    window = _clip_window(surface, slot.bounding_box)
    if window is None:
        return
    left, top, right, bottom = window
    layer = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
    # Integer shift keeps glyph positioning identical to an unclipped draw
    shifted = replace(block, lines=[replace(line, x=line.x - left, baseline=line.baseline - top) for line in lines])
    draw_lines(ImageDraw.Draw(layer), shifted)
    surface.alpha_composite(layer, dest=(left, top))
    logger.debug(f"Overlaid {len(lines)} lines at {fit.font_size}px into {slot.slot_id}")


def image_placement(slot: Slot, media_size: tuple[int, int]) -> Placement:
    """Where a replacement image lands in an image slot."""
    constraints: ImageConstraints = slot.constraints
    styling: MediaStyling = slot.styling
    if constraints.fit_mode == ImageFitMode.FREE:
        return free(media_size, slot.bounding_box, styling.scale, styling.align_h, styling.align_v)
    return cover(media_size, slot.bounding_box, constraints.focal_point)


def overlay_image(
    surface: Image.Image,
    slot: Slot,
    media: DecodedMedia,
    *,
    clip: bool = True,
) -> Optional[BoundingBox]:
    """
    Draw a replacement image into an image slot, in place.

    Returns:
        Pixel box drawn, or None if nothing was visible
    """
    placement = image_placement(slot, media.size)
    drawn = draw_media(surface, media.image, placement, clip=slot.bounding_box if clip else None)
    logger.debug(f"Overlaid image {media.key} into {slot.slot_id} at {drawn}")
    return drawn


def _clip_window(surface: Image.Image, box: BoundingBox) -> Optional[tuple[int, int, int, int]]:
    left, top, right, bottom = box.to_pixels()
    left, top = max(left, 0), max(top, 0)
    right, bottom = min(right, surface.width), min(bottom, surface.height)
    if right <= left or bottom <= top:
        return None
    return (left, top, right, bottom)
