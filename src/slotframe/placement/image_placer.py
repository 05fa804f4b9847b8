"""
Module: placement.image_placer

Purpose:
    Placement arithmetic for media inside a box. The base renderer, bounds
    capture and the compositor overlay all call these functions, so a
    captured box always matches the pixels that get drawn.

Key Functions:
    - cover(): Fill the box exactly, aspect preserved, cropped source
    - fit(): Contain inside the box, aspect preserved, scaled and aligned
    - free(): Natural size times scale, aligned
    - stretch(): Fill the box exactly, aspect ignored
    - place(): Dispatch on FillMode
    - rotated_bounds(): Axis-aligned bounds of a rotated rectangle
    - draw_media(): Paste a placed image onto a canvas

Dependencies:
    - PIL.Image
    - core.models.geometry.BoundingBox

Used By:
    - compositor.renderer
    - compositor.overlay
    - capture.bounds_capture
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from ..core.models.elements import FillMode, normalize_v_align
from ..core.models.geometry import BoundingBox

Size = tuple[int, int]


@dataclass(frozen=True, slots=True)
class Placement:
    """
    Where media lands.

    Attributes:
        dest: Drawn rectangle on the canvas (may extend past the box)
        source: Region of the media to draw, in media pixels (None = all)
    """

    dest: BoundingBox
    source: Optional[BoundingBox] = None


def _aligned(start: float, extent: float, drawn: float, align: str) -> float:
    if align in ("left", "top"):
        return start
    if align in ("right", "bottom"):
        return start + extent - drawn
    return start + (extent - drawn) / 2


def _check_size(media_size: Size) -> tuple[int, int]:
    width, height = media_size
    if width <= 0 or height <= 0:
        raise ValueError(f"media size must be positive: {width}x{height}")
    return width, height


# ─────────────────────────────────────────────────────────────────────────────
# Fill modes
# ─────────────────────────────────────────────────────────────────────────────

def cover(media_size: Size, box: BoundingBox, focal_point: str = "center") -> Placement:
    """
    Fill the box exactly, preserving aspect ratio.

    The source is cropped around the focal point (centered by default) so
    that its aspect ratio equals the box's.

    Example:
        >>> p = cover((300, 600), BoundingBox(0, 0, 400, 400))
        >>> p.source
        BoundingBox(0, 150, 300x300)
    """
    img_w, img_h = _check_size(media_size)
    if box.is_empty:
        return Placement(dest=box, source=BoundingBox(0, 0, img_w, img_h))

    img_ratio = img_w / img_h
    box_ratio = box.width / box.height

    if img_ratio > box_ratio:
        # Wider than the box: crop left/right
        src_w = img_h * box_ratio
        src_h = float(img_h)
        src_x = _aligned(0, img_w, src_w, focal_point)
        src_y = 0.0
    else:
        # Taller than the box: crop top/bottom
        src_w = float(img_w)
        src_h = img_w / box_ratio
        src_x = 0.0
        src_y = _aligned(0, img_h, src_h, focal_point)

    return Placement(dest=box, source=BoundingBox(src_x, src_y, src_w, src_h))


def fit(
    media_size: Size,
    box: BoundingBox,
    scale: float = 1.0,
    h_align: str = "center",
    v_align: str = "middle",
) -> Placement:
    """
    Contain the media in the box, preserving aspect ratio.

    The contained size is multiplied by scale; with scale > 1 the drawn
    rectangle overflows the box.
    """
    img_w, img_h = _check_size(media_size)
    aspect = img_w / img_h
    box_aspect = box.width / box.height if box.height else math.inf

    if aspect > box_aspect:
        draw_w = box.width * scale
        draw_h = box.width / aspect * scale
    else:
        draw_w = box.height * aspect * scale
        draw_h = box.height * scale

    v_align = normalize_v_align(v_align)
    x = _aligned(box.x, box.width, draw_w, h_align)
    y = _aligned(box.y, box.height, draw_h, v_align)
    return Placement(dest=BoundingBox(x, y, draw_w, draw_h))


def free(
    media_size: Size,
    box: BoundingBox,
    scale: float = 1.0,
    h_align: str = "center",
    v_align: str = "middle",
) -> Placement:
    """Natural size times scale, aligned inside the box."""
    img_w, img_h = _check_size(media_size)
    draw_w = img_w * scale
    draw_h = img_h * scale
    v_align = normalize_v_align(v_align)
    x = _aligned(box.x, box.width, draw_w, h_align)
    y = _aligned(box.y, box.height, draw_h, v_align)
    return Placement(dest=BoundingBox(x, y, draw_w, draw_h))


def stretch(media_size: Size, box: BoundingBox) -> Placement:
    """Fill the box exactly, ignoring aspect ratio."""
    _check_size(media_size)
    return Placement(dest=box)


def place(
    media_size: Size,
    box: BoundingBox,
    fill_mode: FillMode,
    *,
    scale: float = 1.0,
    h_align: str = "center",
    v_align: str = "middle",
    focal_point: str = "center",
) -> Placement:
    """Place media with the given fill mode."""
    if fill_mode == FillMode.COVER:
        return cover(media_size, box, focal_point)
    if fill_mode == FillMode.FIT:
        return fit(media_size, box, scale, h_align, v_align)
    if fill_mode == FillMode.FREE:
        return free(media_size, box, scale, h_align, v_align)
    if fill_mode == FillMode.STRETCH:
        return stretch(media_size, box)
    raise ValueError(f"Unknown fill mode: {fill_mode!r}")


def rotated_bounds(rect: BoundingBox, degrees: float) -> BoundingBox:
    """
    Axis-aligned bounds of a rectangle rotated about its center.

    Returns rect unchanged for multiples of 360 degrees.
    """
    if not degrees or degrees % 360 == 0:
        return rect
    radians = math.radians(degrees)
    cos_a = abs(math.cos(radians))
    sin_a = abs(math.sin(radians))
    new_w = rect.width * cos_a + rect.height * sin_a
    new_h = rect.width * sin_a + rect.height * cos_a
    cx, cy = rect.center
    return BoundingBox(cx - new_w / 2, cy - new_h / 2, new_w, new_h)


# ─────────────────────────────────────────────────────────────────────────────
# Drawing
# ─────────────────────────────────────────────────────────────────────────────

def draw_media(
    canvas: Image.Image,
    image: Image.Image,
    placement: Placement,
    *,
    rotation: float = 0.0,
    clip: Optional[BoundingBox] = None,
) -> Optional[BoundingBox]:
    """
    Draw placed media onto an RGBA canvas in place.

    Args:
        canvas: RGBA canvas, modified in place
        image: Decoded RGBA media
        placement: Result of place()/cover()/fit()/...
        rotation: Clockwise degrees about the drawn center
        clip: Optional clip box; the canvas edge always clips

    Returns:
        Pixel box actually drawn, or None if nothing was visible
    """
    source = image if placement.source is None else image.crop(placement.source.to_pixels())
    width, height = placement.dest.pixel_size()
    if width <= 0 or height <= 0:
        return None

    layer = source.convert("RGBA").resize((width, height), Image.Resampling.LANCZOS)
    left, top, _, _ = placement.dest.to_pixels()
    if rotation and rotation % 360:
        layer = layer.rotate(-rotation, resample=Image.Resampling.BICUBIC, expand=True)
        cx, cy = placement.dest.center
        left = int(round(cx - layer.width / 2))
        top = int(round(cy - layer.height / 2))

    # Visible window: layer rect, intersected with canvas and clip
    win_l, win_t = max(left, 0), max(top, 0)
    win_r = min(left + layer.width, canvas.width)
    win_b = min(top + layer.height, canvas.height)
    if clip is not None:
        cl, ct, cr, cb = clip.to_pixels()
        win_l, win_t = max(win_l, cl), max(win_t, ct)
        win_r, win_b = min(win_r, cr), min(win_b, cb)
    if win_r <= win_l or win_b <= win_t:
        return None

    visible = layer.crop((win_l - left, win_t - top, win_r - left, win_b - top))
    canvas.alpha_composite(visible, dest=(win_l, win_t))
    return BoundingBox.from_edges(win_l, win_t, win_r, win_b)
