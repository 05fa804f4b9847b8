"""
Module: geometry

Purpose:
    Provides the BoundingBox and Overflow dataclasses - rectangles in
    canvas pixel space used for element containers, captured content
    bounds and slot regions.

Key Functions:
    - BoundingBox.union(other): Smallest box covering both boxes
    - BoundingBox.inset(padding): Content area inside a padded container
    - BoundingBox.overflow_beyond(container): Overflow amounts per edge
    - BoundingBox.to_pixels(): The single float -> pixel rounding rule
    - BoundingBox.to_dict() / BoundingBox.from_dict(): Serialization

Dependencies:
    - dataclasses (std)
    - math (std)

Used By:
    - core.models.elements.ContentElement
    - core.models.slots.Slot
    - placement.image_placer
    - capture.bounds_capture
    - compositor
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Axis-aligned rectangle in canvas coordinates (pixels, float precision).

    Coordinates follow the canvas convention: origin at the top-left of the
    canvas, x grows right, y grows down. Coordinates may be negative when
    content is placed partly off-canvas.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent
        height: Vertical extent

    Invariants:
        - width >= 0
        - height >= 0

    Example:
        >>> box = BoundingBox(10, 20, 100, 50)
        >>> box.right, box.bottom
        (110, 70)
        >>> box.to_pixels()
        (10, 20, 110, 70)
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        """Validate extents on construction."""
        if self.width < 0:
            raise ValueError(f"width must be >= 0: {self.width}")
        if self.height < 0:
            raise ValueError(f"height must be >= 0: {self.height}")

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def right(self) -> float:
        """X-coordinate of the right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Y-coordinate of the bottom edge."""
        return self.y + self.height

    @property
    def area(self) -> float:
        """Area in square pixels."""
        return self.width * self.height

    @property
    def center(self) -> tuple[float, float]:
        """(x, y) of the center point."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_empty(self) -> bool:
        """True when the box covers no area."""
        return self.width <= 0 or self.height <= 0

    # ─────────────────────────────────────────────────────────────────────────
    # Geometry
    # ─────────────────────────────────────────────────────────────────────────

    def contains_box(self, other: BoundingBox) -> bool:
        """Check whether other lies entirely inside this box (edges inclusive)."""
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def union(self, other: BoundingBox) -> BoundingBox:
        """Smallest box covering both boxes."""
        left = min(self.x, other.x)
        top = min(self.y, other.y)
        right = max(self.right, other.right)
        bottom = max(self.bottom, other.bottom)
        return BoundingBox(left, top, right - left, bottom - top)

    def inset(self, padding: float) -> BoundingBox:
        """
        Content area inside a uniform padding.

        Extents are clamped at zero so an oversized padding yields an empty
        box rather than an invalid one.
        """
        if not padding:
            return self
        return BoundingBox(
            self.x + padding,
            self.y + padding,
            max(0.0, self.width - padding * 2),
            max(0.0, self.height - padding * 2),
        )

    def translate(self, dx: float, dy: float) -> BoundingBox:
        """Box moved by (dx, dy)."""
        return BoundingBox(self.x + dx, self.y + dy, self.width, self.height)

    def overflow_beyond(self, container: BoundingBox) -> Optional[Overflow]:
        """
        Amount by which this box extends past a container on each edge.

        Returns:
            Overflow with non-negative amounts, or None when fully inside.
        """
        overflow = Overflow(
            left=max(0.0, container.x - self.x),
            right=max(0.0, self.right - container.right),
            top=max(0.0, container.y - self.y),
            bottom=max(0.0, self.bottom - container.bottom),
        )
        return overflow if overflow.any else None

    def to_pixels(self) -> tuple[int, int, int, int]:
        """
        Get as integer (left, top, right, bottom) for PIL.

        Edges are rounded independently so that adjacent boxes sharing an
        edge also share the pixel boundary.
        """
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.right)),
            int(round(self.bottom)),
        )

    def pixel_size(self) -> tuple[int, int]:
        """(width, height) of the rounded pixel box."""
        left, top, right, bottom = self.to_pixels()
        return (right - left, bottom - top)

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float) -> BoundingBox:
        """Build a box from edge coordinates."""
        return cls(left, top, right - left, bottom - top)

    @classmethod
    def union_all(cls, boxes: Iterable[BoundingBox]) -> Optional[BoundingBox]:
        """Union of several boxes, or None for an empty iterable."""
        result: Optional[BoundingBox] = None
        for box in boxes:
            result = box if result is None else result.union(box)
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        """Serialize to {x, y, width, height}."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict) -> BoundingBox:
        """Deserialize from {x, y, width, height}."""
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )

    def __repr__(self) -> str:
        return f"BoundingBox({self.x:g}, {self.y:g}, {self.width:g}x{self.height:g})"


@dataclass(frozen=True, slots=True)
class Overflow:
    """
    Per-edge overflow of drawn content past its container, in pixels.

    Reported alongside captured media bounds when an explicit scale makes
    the drawn rectangle larger than the container.
    """

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0

    def __post_init__(self) -> None:
        for name in ("left", "right", "top", "bottom"):
            value = getattr(self, name)
            if value < 0 or math.isnan(value):
                raise ValueError(f"overflow {name} must be >= 0: {value}")

    @property
    def any(self) -> bool:
        """True if content overflows on at least one edge."""
        return bool(self.left or self.right or self.top or self.bottom)

    def to_dict(self) -> dict:
        return {"left": self.left, "right": self.right, "top": self.top, "bottom": self.bottom}

    @classmethod
    def from_dict(cls, data: dict) -> Overflow:
        return cls(
            left=float(data.get("left", 0.0)),
            right=float(data.get("right", 0.0)),
            top=float(data.get("top", 0.0)),
            bottom=float(data.get("bottom", 0.0)),
        )
