"""
Placement Package

Media placement arithmetic and text line layout shared by rendering,
capture and overlay.
"""

from .image_placer import Placement, cover, draw_media, fit, free, place, rotated_bounds, stretch
from .text_layout import (
    BASELINE_RATIO,
    PlacedLine,
    TextBlock,
    apply_transform,
    draw_lines,
    layout_text,
    place_lines,
    wrap_words,
)

__all__ = [
    "Placement",
    "cover",
    "draw_media",
    "fit",
    "free",
    "place",
    "rotated_bounds",
    "stretch",
    "BASELINE_RATIO",
    "PlacedLine",
    "TextBlock",
    "apply_transform",
    "draw_lines",
    "layout_text",
    "place_lines",
    "wrap_words",
]
