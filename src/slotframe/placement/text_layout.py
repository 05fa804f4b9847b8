"""
Module: placement.text_layout

Purpose:
    Line wrapping and line placement for text. The renderer, bounds
    capture, the fitter and the overlay all go through wrap_words() and
    place_lines(), so wrapped lines and baselines are identical wherever
    text is measured or drawn.

Key Functions:
    - apply_transform(): uppercase / lowercase / capitalize
    - wrap_words(): Greedy word wrap against a width measure
    - place_lines(): Alignment and baselines for wrapped lines
    - layout_text(): Wrap + place for a text element's typography
    - draw_lines(): Draw placed lines with ImageDraw

Dependencies:
    - PIL.ImageDraw, PIL.ImageFont
    - media.fonts.FontResolver

Used By:
    - compositor.renderer
    - compositor.overlay
    - capture.bounds_capture
    - fitting.text_fitter
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Sequence

from PIL import ImageDraw, ImageFont

from ..core.models.elements import Typography, normalize_v_align
from ..core.models.geometry import BoundingBox
from ..media.fonts import FontResolver

# Baseline of line i sits at (i + BASELINE_RATIO) line pitches below the block top
BASELINE_RATIO = 0.8

_ANCHORS = {"left": "ls", "center": "ms", "right": "rs"}
_WORD_START = re.compile(r"(^|\s)(\S)")


def apply_transform(text: str, transform: str) -> str:
    """Apply a CSS-style text transform."""
    if transform == "uppercase":
        return text.upper()
    if transform == "lowercase":
        return text.lower()
    if transform == "capitalize":
        return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), text)
    return text


def wrap_words(
    text: str,
    max_width: float,
    measure: Callable[[str], float],
    *,
    wrap: bool = True,
) -> List[str]:
    """
    Greedy word wrap.

    Words are whitespace-separated. A word is appended to the current line
    if the result fits max_width or the line is still empty, so a single
    word wider than max_width stays whole on its own line.

    Args:
        text: Text to wrap
        max_width: Available width in pixels
        measure: Width of a string at the current font
        wrap: If False, all words go on one line

    Returns:
        Lines (empty list for blank text)
    """
    words = text.split()
    if not words:
        return []
    if not wrap:
        return [" ".join(words)]

    lines: List[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if not current or measure(candidate) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


@dataclass(frozen=True, slots=True)
class PlacedLine:
    """
    One line ready to draw.

    Attributes:
        text: Line text
        x: Anchor x (left edge, center or right edge per anchor)
        baseline: Baseline y
        anchor: Pillow text anchor ('ls', 'ms' or 'rs')
    """

    text: str
    x: float
    baseline: float
    anchor: str


def place_lines(
    lines: Sequence[str],
    area: BoundingBox,
    font_size: float,
    line_height: float,
    align_h: str = "center",
    align_v: str = "middle",
    baseline_ratio: float = BASELINE_RATIO,
) -> List[PlacedLine]:
    """
    Position wrapped lines inside an area.

    The block is len(lines) * font_size * line_height tall and is aligned
    top, middle or bottom; each line is anchored at its baseline.
    """
    pitch = font_size * line_height
    total = len(lines) * pitch
    align_v = normalize_v_align(align_v)
    if align_v == "top":
        start_y = area.y
    elif align_v == "bottom":
        start_y = area.bottom - total
    else:
        start_y = area.y + (area.height - total) / 2

    if align_h == "left":
        x = area.x
    elif align_h == "right":
        x = area.right
    else:
        x = area.x + area.width / 2
    anchor = _ANCHORS.get(align_h, "ms")

    return [
        PlacedLine(text=line, x=x, baseline=start_y + (i + baseline_ratio) * pitch, anchor=anchor)
        for i, line in enumerate(lines)
    ]


@dataclass(frozen=True)
class TextBlock:
    """Wrapped and placed text with the font used to measure it."""

    lines: List[PlacedLine]
    font: ImageFont.FreeTypeFont
    font_size: int
    color: str

    @property
    def is_empty(self) -> bool:
        return not self.lines


def layout_text(
    text: str,
    container: BoundingBox,
    typography: Typography,
    fonts: FontResolver,
    *,
    font_size: int | None = None,
    baseline_ratio: float = BASELINE_RATIO,
) -> TextBlock:
    """
    Wrap and place a text element's text inside its container.

    Args:
        text: Raw text (the typography's transform is applied here)
        container: Element container; typography padding is inset
        typography: Element typography
        fonts: Shared font resolver
        font_size: Override of typography.font_size (used by the overlay)
    """
    size = font_size or typography.font_size
    font = fonts.resolve(typography.font_family, size, typography.font_weight, typography.font_style)
    area = container.inset(typography.padding)
    transformed = apply_transform(text, typography.text_transform)
    lines = wrap_words(transformed, area.width, font.getlength, wrap=typography.wrap)
    placed = place_lines(
        lines, area, size, typography.line_height,
        typography.align_h, typography.align_v, baseline_ratio,
    )
    return TextBlock(lines=placed, font=font, font_size=size, color=typography.color)


def draw_lines(draw: ImageDraw.ImageDraw, block: TextBlock, *, fill: str | int | None = None) -> None:
    """Draw a placed text block."""
    color = block.color if fill is None else fill
    for line in block.lines:
        draw.text((line.x, line.baseline), line.text, fill=color, font=block.font, anchor=line.anchor)
