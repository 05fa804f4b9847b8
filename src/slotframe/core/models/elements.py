"""
Module: elements

Purpose:
    Frozen layout data model. A LayoutSnapshot is an ordered collection of
    ContentElements (text, media or empty regions) placed on a canvas.
    Snapshots are values: rendering never mutates them, and every render
    call receives the snapshot it should draw.

Key Classes:
    - ElementKind: Closed set of element kinds (text, media, empty)
    - FillMode: Media placement strategy (fit, cover, stretch, free)
    - Typography / TextPayload: Text content and its typography
    - MediaPayload: Media reference plus placement parameters
    - ContentElement: A positioned unit in the layout
    - LayoutSnapshot: The frozen layout, with id / persistent-id lookup

Dependencies:
    - dataclasses (std)
    - uuid (std)
    - .geometry.BoundingBox

Used By:
    - capture.bounds_capture: Measures elements
    - registry: Creates slots from elements
    - compositor.renderer: Draws snapshots
    - core.utils.serialization: Layout records
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterator, Optional, Tuple

from .geometry import BoundingBox

H_ALIGNMENTS = ("left", "center", "right")
V_ALIGNMENTS = ("top", "middle", "bottom")
TEXT_TRANSFORMS = ("none", "uppercase", "lowercase", "capitalize")
FONT_WEIGHTS = ("normal", "bold")
FONT_STYLES = ("normal", "italic")


def normalize_v_align(value: str) -> str:
    """Map the 'center' spelling of vertical alignment onto 'middle'."""
    return "middle" if value == "center" else value


class ElementKind(str, Enum):
    """Kind of content held by a layout element."""
    TEXT = "text"
    MEDIA = "media"
    EMPTY = "empty"

    def __str__(self) -> str:
        return self.value


class FillMode(str, Enum):
    """How media is placed inside its container."""
    FIT = "fit"          # Contain, aspect preserved, multiplied by scale
    COVER = "cover"      # Fill the box, aspect preserved, centered crop
    STRETCH = "stretch"  # Fill the box, aspect ignored
    FREE = "free"        # Natural size multiplied by scale

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> FillMode:
        """Parse a fill mode, accepting the legacy 'fill' spelling of cover."""
        if value == "fill":
            return cls.COVER
        return cls(value)


@dataclass(frozen=True, slots=True)
class Typography:
    """
    Typography of a text element (immutable).

    Attributes:
        font_family: Family name, resolved by media.fonts.FontResolver
        font_size: Rendered size in pixels
        font_weight: 'normal' or 'bold'
        font_style: 'normal' or 'italic'
        color: Fill color (any PIL color string)
        align_h: Line alignment - 'left', 'center' or 'right'
        align_v: Block alignment - 'top', 'middle' or 'bottom'
        text_transform: 'none', 'uppercase', 'lowercase' or 'capitalize'
        line_height: Line pitch as a multiple of font_size
        padding: Uniform inset between container and text area
        wrap: Greedy word-wrap to the text area width
    """

    font_family: str = "DejaVu Sans"
    font_size: int = 48
    font_weight: str = "normal"
    font_style: str = "normal"
    color: str = "#000000"
    align_h: str = "center"
    align_v: str = "middle"
    text_transform: str = "none"
    line_height: float = 1.2
    padding: float = 0.0
    wrap: bool = True

    def __post_init__(self) -> None:
        if self.font_size <= 0:
            raise ValueError(f"font_size must be positive: {self.font_size}")
        if self.font_weight not in FONT_WEIGHTS:
            raise ValueError(f"font_weight must be one of {FONT_WEIGHTS}: {self.font_weight!r}")
        if self.font_style not in FONT_STYLES:
            raise ValueError(f"font_style must be one of {FONT_STYLES}: {self.font_style!r}")
        if self.align_h not in H_ALIGNMENTS:
            raise ValueError(f"align_h must be one of {H_ALIGNMENTS}: {self.align_h!r}")
        if normalize_v_align(self.align_v) not in V_ALIGNMENTS:
            raise ValueError(f"align_v must be one of {V_ALIGNMENTS}: {self.align_v!r}")
        if self.text_transform not in TEXT_TRANSFORMS:
            raise ValueError(f"text_transform must be one of {TEXT_TRANSFORMS}: {self.text_transform!r}")
        if self.line_height <= 0:
            raise ValueError(f"line_height must be positive: {self.line_height}")
        if self.padding < 0:
            raise ValueError(f"padding must be >= 0: {self.padding}")

    def to_dict(self) -> dict:
        return {
            "fontFamily": self.font_family,
            "fontSize": self.font_size,
            "fontWeight": self.font_weight,
            "fontStyle": self.font_style,
            "color": self.color,
            "alignH": self.align_h,
            "alignV": self.align_v,
            "textTransform": self.text_transform,
            "lineHeight": self.line_height,
            "padding": self.padding,
            "wrap": self.wrap,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Typography:
        defaults = cls()
        return cls(
            font_family=data.get("fontFamily", defaults.font_family),
            font_size=int(data.get("fontSize", defaults.font_size)),
            font_weight=data.get("fontWeight", defaults.font_weight),
            font_style=data.get("fontStyle", defaults.font_style),
            color=data.get("color", defaults.color),
            align_h=data.get("alignH", defaults.align_h),
            align_v=data.get("alignV", defaults.align_v),
            text_transform=data.get("textTransform", defaults.text_transform),
            line_height=float(data.get("lineHeight", defaults.line_height)),
            padding=float(data.get("padding", defaults.padding)),
            wrap=bool(data.get("wrap", defaults.wrap)),
        )


@dataclass(frozen=True, slots=True)
class TextPayload:
    """Text content of an element."""

    text: str
    typography: Typography = field(default_factory=Typography)

    def to_dict(self) -> dict:
        return {"text": self.text, "typography": self.typography.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> TextPayload:
        return cls(
            text=data.get("text", ""),
            typography=Typography.from_dict(data.get("typography", {})),
        )


@dataclass(frozen=True, slots=True)
class MediaPayload:
    """
    Media content of an element.

    Attributes:
        reference: Media reference understood by media.loader.MediaLoader
        fill_mode: Placement strategy inside the container
        scale: Multiplier applied in fit/free modes (> 1 may overflow)
        align_h: Horizontal anchor - 'left', 'center' or 'right'
        align_v: Vertical anchor - 'top', 'middle' or 'bottom'
        rotation: Clockwise rotation in degrees about the drawn center
        padding: Uniform inset between container and placement area
    """

    reference: str
    fill_mode: FillMode = FillMode.FIT
    scale: float = 1.0
    align_h: str = "center"
    align_v: str = "middle"
    rotation: float = 0.0
    padding: float = 0.0

    def __post_init__(self) -> None:
        if not self.reference:
            raise ValueError("media reference cannot be empty")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive: {self.scale}")
        if self.align_h not in H_ALIGNMENTS:
            raise ValueError(f"align_h must be one of {H_ALIGNMENTS}: {self.align_h!r}")
        if normalize_v_align(self.align_v) not in V_ALIGNMENTS:
            raise ValueError(f"align_v must be one of {V_ALIGNMENTS}: {self.align_v!r}")
        if self.padding < 0:
            raise ValueError(f"padding must be >= 0: {self.padding}")

    def to_dict(self) -> dict:
        return {
            "reference": self.reference,
            "fillMode": self.fill_mode.value,
            "scale": self.scale,
            "alignH": self.align_h,
            "alignV": self.align_v,
            "rotation": self.rotation,
            "padding": self.padding,
        }

    @classmethod
    def from_dict(cls, data: dict) -> MediaPayload:
        return cls(
            reference=data["reference"],
            fill_mode=FillMode.parse(data.get("fillMode", "fit")),
            scale=float(data.get("scale", 1.0)),
            align_h=data.get("alignH", "center"),
            align_v=data.get("alignV", "middle"),
            rotation=float(data.get("rotation", 0.0)),
            padding=float(data.get("padding", 0.0)),
        )


@dataclass(frozen=True, slots=True)
class ContentElement:
    """
    A positioned unit in a frozen layout (immutable).

    Attributes:
        id: Ephemeral identifier, regenerated whenever the layout is rebuilt
        persistent_id: Stable identifier that survives rebuilds
        kind: TEXT, MEDIA or EMPTY
        container: Container geometry on the canvas
        text: Payload for TEXT elements
        media: Payload for MEDIA elements
        fill_color: Optional solid fill drawn for EMPTY elements

    Invariants:
        - kind TEXT carries a text payload and no media payload
        - kind MEDIA carries a media payload and no text payload
        - kind EMPTY carries neither
    """

    id: str
    persistent_id: str
    kind: ElementKind
    container: BoundingBox
    text: Optional[TextPayload] = None
    media: Optional[MediaPayload] = None
    fill_color: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("element id cannot be empty")
        if not self.persistent_id:
            raise ValueError(f"element {self.id} has no persistent_id")
        if self.kind == ElementKind.TEXT and (self.text is None or self.media is not None):
            raise ValueError(f"text element {self.id} must carry only a text payload")
        if self.kind == ElementKind.MEDIA and (self.media is None or self.text is not None):
            raise ValueError(f"media element {self.id} must carry only a media payload")
        if self.kind == ElementKind.EMPTY and (self.text is not None or self.media is not None):
            raise ValueError(f"empty element {self.id} cannot carry a payload")

    @property
    def has_content(self) -> bool:
        """True if the element draws text or media."""
        if self.kind == ElementKind.TEXT:
            return bool(self.text and self.text.text.strip())
        return self.kind == ElementKind.MEDIA

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "persistentId": self.persistent_id,
            "kind": self.kind.value,
            "container": self.container.to_dict(),
        }
        if self.text is not None:
            d["text"] = self.text.to_dict()
        if self.media is not None:
            d["media"] = self.media.to_dict()
        if self.fill_color is not None:
            d["fillColor"] = self.fill_color
        return d

    @classmethod
    def from_dict(cls, data: dict) -> ContentElement:
        return cls(
            id=str(data["id"]),
            persistent_id=str(data["persistentId"]),
            kind=ElementKind(data["kind"]),
            container=BoundingBox.from_dict(data["container"]),
            text=TextPayload.from_dict(data["text"]) if data.get("text") else None,
            media=MediaPayload.from_dict(data["media"]) if data.get("media") else None,
            fill_color=data.get("fillColor"),
        )


def _new_element_id() -> str:
    return f"el-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class LayoutSnapshot:
    """
    Frozen layout handed to the renderer and compositor (immutable).

    Elements are drawn in order (later elements on top). Lookups by
    ephemeral id and persistent id are indexed on construction.

    Attributes:
        width: Canvas width in pixels
        height: Canvas height in pixels
        elements: Ordered elements
        background_color: Solid canvas background
        background_reference: Optional media reference covering the canvas
        layout_id: Identifier of the authored layout (page)

    Example:
        >>> snapshot = LayoutSnapshot(1080, 1080, elements=(title, photo))
        >>> snapshot.find_by_persistent_id("title-uuid") is title
        True
    """

    width: int
    height: int
    elements: Tuple[ContentElement, ...] = ()
    background_color: str = "#ffffff"
    background_reference: Optional[str] = None
    layout_id: str = ""
    _by_id: dict = field(init=False, repr=False, compare=False)
    _by_persistent_id: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"canvas must have positive size: {self.width}x{self.height}")
        by_id: dict[str, ContentElement] = {}
        by_persistent_id: dict[str, ContentElement] = {}
        for element in self.elements:
            if element.id in by_id:
                raise ValueError(f"duplicate element id: {element.id}")
            if element.persistent_id in by_persistent_id:
                raise ValueError(f"duplicate persistent id: {element.persistent_id}")
            by_id[element.id] = element
            by_persistent_id[element.persistent_id] = element
        object.__setattr__(self, "elements", tuple(self.elements))
        object.__setattr__(self, "_by_id", by_id)
        object.__setattr__(self, "_by_persistent_id", by_persistent_id)

    def __iter__(self) -> Iterator[ContentElement]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) of the canvas."""
        return (self.width, self.height)

    def find_by_id(self, element_id: str) -> Optional[ContentElement]:
        """Find an element by its ephemeral id."""
        return self._by_id.get(element_id)

    def find_by_persistent_id(self, persistent_id: str) -> Optional[ContentElement]:
        """Find an element by its persistent id (stable across rebuilds)."""
        return self._by_persistent_id.get(persistent_id)

    def rebuild(self, id_factory: Callable[[], str] = _new_element_id) -> LayoutSnapshot:
        """
        Copy of this snapshot with fresh ephemeral ids.

        Mirrors what the authoring side does whenever it rebuilds its grid:
        element ids change, persistent ids do not.
        """
        elements = tuple(replace(e, id=id_factory()) for e in self.elements)
        return replace(self, elements=elements)

    def without(self, persistent_id: str) -> LayoutSnapshot:
        """Copy of this snapshot with one element removed."""
        elements = tuple(e for e in self.elements if e.persistent_id != persistent_id)
        return replace(self, elements=elements)

    def to_dict(self) -> dict:
        background: dict = {"color": self.background_color}
        if self.background_reference:
            background["reference"] = self.background_reference
        return {
            "layoutId": self.layout_id,
            "canvas": {"width": self.width, "height": self.height},
            "background": background,
            "elements": [e.to_dict() for e in self.elements],
        }

    @classmethod
    def from_dict(cls, data: dict) -> LayoutSnapshot:
        canvas = data["canvas"]
        background = data.get("background", {})
        return cls(
            width=int(canvas["width"]),
            height=int(canvas["height"]),
            elements=tuple(ContentElement.from_dict(e) for e in data.get("elements", [])),
            background_color=background.get("color", "#ffffff"),
            background_reference=background.get("reference"),
            layout_id=data.get("layoutId", ""),
        )
