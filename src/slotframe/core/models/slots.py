"""
Module: slots

Purpose:
    Provides the Slot dataclass - a constrained, editable region tied to
    one content element - together with its kind-specific constraints and
    the locked styling snapshot captured at creation time.

Key Classes:
    - SlotKind: Closed set of slot kinds (text, image)
    - ImageFitMode: How replacement images fill an image slot
    - TextConstraints / ImageConstraints: Kind-specific limits
    - TextStyling / MediaStyling: Locked styling snapshots
    - Slot: The slot itself, with to_record() / from_record()

Dependencies:
    - dataclasses (std)
    - .geometry: BoundingBox, Overflow

Used By:
    - registry: Creates and stores slots
    - compositor: Hides source elements and overlays values
    - core.utils.serialization: Slot records

Design Notes:
    A slot refers to its source element by identifier only
    (source_element_id / source_persistent_id) and resolves it against the
    layout snapshot on every pass. Field-level validation lives in
    core.schemas.validator so that bad configuration is reported per field
    instead of failing inside a constructor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .geometry import BoundingBox, Overflow

NAMESPACE_SEPARATOR = ":"

DEFAULT_MAX_CHARACTERS = 100
DEFAULT_MIN_FONT_SIZE = 16
DEFAULT_MAX_FONT_SIZE = 72
DEFAULT_LINE_HEIGHT = 1.2
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_ALLOWED_FORMATS: Tuple[str, ...] = ("jpg", "png", "webp", "gif")

FONT_SIZE_MODES = ("auto-fit", "fixed")
FOCAL_POINTS = ("center", "top", "bottom", "left", "right")


class SlotKind(str, Enum):
    """Kind of editable slot."""
    TEXT = "text"
    IMAGE = "image"

    def __str__(self) -> str:
        return self.value


class ImageFitMode(str, Enum):
    """How a replacement image fills an image slot."""
    COVER = "cover"  # Crop to fill the box
    FREE = "free"    # Scale proportionally, aligned per the locked styling

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TextConstraints:
    """
    Limits applied to replacement text.

    Attributes:
        max_characters: Hard cap; longer input is truncated before fitting
        font_size_mode: 'auto-fit' (binary search) or 'fixed' (max size)
        min_font_size: Smallest size the fitter may choose
        max_font_size: Largest size the fitter may choose
        word_wrap: Greedy word-wrap to the slot width
        horizontal_align: 'left', 'center' or 'right'
        vertical_align: 'top', 'middle' or 'bottom'
        line_height: Line pitch as a multiple of font size
    """

    max_characters: int = DEFAULT_MAX_CHARACTERS
    font_size_mode: str = "auto-fit"
    min_font_size: int = DEFAULT_MIN_FONT_SIZE
    max_font_size: int = DEFAULT_MAX_FONT_SIZE
    word_wrap: bool = True
    horizontal_align: str = "center"
    vertical_align: str = "middle"
    line_height: float = DEFAULT_LINE_HEIGHT

    def to_dict(self) -> dict:
        return {
            "maxCharacters": self.max_characters,
            "fontSizeMode": self.font_size_mode,
            "minFontSize": self.min_font_size,
            "maxFontSize": self.max_font_size,
            "wordWrap": self.word_wrap,
            "horizontalAlign": self.horizontal_align,
            "verticalAlign": self.vertical_align,
            "lineHeight": self.line_height,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TextConstraints:
        defaults = cls()
        return cls(
            max_characters=int(data.get("maxCharacters", defaults.max_characters)),
            font_size_mode=data.get("fontSizeMode", defaults.font_size_mode),
            min_font_size=int(data.get("minFontSize", defaults.min_font_size)),
            max_font_size=int(data.get("maxFontSize", defaults.max_font_size)),
            word_wrap=bool(data.get("wordWrap", defaults.word_wrap)),
            horizontal_align=data.get("horizontalAlign", defaults.horizontal_align),
            vertical_align=data.get("verticalAlign", defaults.vertical_align),
            line_height=float(data.get("lineHeight", defaults.line_height)),
        )


@dataclass(frozen=True, slots=True)
class ImageConstraints:
    """
    Limits applied to replacement images.

    Attributes:
        fit_mode: COVER (crop to fill) or FREE (scale proportionally)
        focal_point: Crop anchor hint for cover mode
        max_file_size: Largest accepted encoded size in bytes
        allowed_formats: Accepted formats (lowercase, 'jpg' for JPEG)
    """

    fit_mode: ImageFitMode = ImageFitMode.COVER
    focal_point: str = "center"
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_formats: Tuple[str, ...] = DEFAULT_ALLOWED_FORMATS

    def to_dict(self) -> dict:
        return {
            "fitMode": self.fit_mode.value,
            "focalPoint": self.focal_point,
            "maxFileSize": self.max_file_size,
            "allowedFormats": list(self.allowed_formats),
        }

    @classmethod
    def from_dict(cls, data: dict) -> ImageConstraints:
        defaults = cls()
        return cls(
            fit_mode=ImageFitMode(data.get("fitMode", defaults.fit_mode.value)),
            focal_point=data.get("focalPoint", defaults.focal_point),
            max_file_size=int(data.get("maxFileSize", defaults.max_file_size)),
            allowed_formats=tuple(data.get("allowedFormats", defaults.allowed_formats)),
        )


@dataclass(frozen=True, slots=True)
class TextStyling:
    """
    Locked typography snapshot of a text slot's source element.

    Replacement text is always drawn with these properties; formatting
    implied by the raw input value is never applied.
    """

    font_family: str = "DejaVu Sans"
    font_weight: str = "normal"
    font_style: str = "normal"
    color: str = "#000000"
    text_align: str = "center"
    text_transform: str = "none"

    def to_dict(self) -> dict:
        return {
            "fontFamily": self.font_family,
            "fontWeight": self.font_weight,
            "fontStyle": self.font_style,
            "color": self.color,
            "textAlign": self.text_align,
            "textTransform": self.text_transform,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TextStyling:
        defaults = cls()
        return cls(
            font_family=data.get("fontFamily", defaults.font_family),
            font_weight=data.get("fontWeight", defaults.font_weight),
            font_style=data.get("fontStyle", defaults.font_style),
            color=data.get("color", defaults.color),
            text_align=data.get("textAlign", defaults.text_align),
            text_transform=data.get("textTransform", defaults.text_transform),
        )


@dataclass(frozen=True, slots=True)
class MediaStyling:
    """Locked placement snapshot of an image slot's source media."""

    align_h: str = "center"
    align_v: str = "middle"
    scale: float = 1.0

    def to_dict(self) -> dict:
        return {"alignH": self.align_h, "alignV": self.align_v, "scale": self.scale}

    @classmethod
    def from_dict(cls, data: dict) -> MediaStyling:
        return cls(
            align_h=data.get("alignH", "center"),
            align_v=data.get("alignV", "middle"),
            scale=float(data.get("scale", 1.0)),
        )


Constraints = Union[TextConstraints, ImageConstraints]
Styling = Union[TextStyling, MediaStyling]


@dataclass(frozen=True)
class Slot:
    """
    Editable region tied to one content element (immutable).

    Attributes:
        slot_id: Identifier, namespaced per layout instance ("ns:local")
        source_element_id: Ephemeral id of the element at capture time
        source_persistent_id: Persistent id used to resolve the element
        kind: TEXT or IMAGE
        bounding_box: Tight box of the rendered content
        constraints: TextConstraints or ImageConstraints (matches kind)
        styling: TextStyling or MediaStyling (matches kind)
        default_content: Authored text or media reference
        field_name: Identifier-safe form field name
        field_label: Human readable label
        field_description: Optional help text
        required: Whether the consumer must supply a value
        overflow: Overflow of the captured media past its container

    Example:
        >>> slot.local_id
        'headline-uuid'
        >>> Slot.from_record(slot.to_record()) == slot
        True
    """

    slot_id: str
    source_element_id: str
    source_persistent_id: str
    kind: SlotKind
    bounding_box: BoundingBox
    constraints: Constraints
    styling: Styling
    field_name: str
    field_label: str
    default_content: str = ""
    field_description: str = ""
    required: bool = False
    overflow: Optional[Overflow] = field(default=None)

    @property
    def namespace(self) -> str:
        """Namespace prefix of slot_id ('' when not namespaced)."""
        ns, sep, _ = self.slot_id.partition(NAMESPACE_SEPARATOR)
        return ns if sep else ""

    @property
    def local_id(self) -> str:
        """slot_id without its namespace prefix."""
        _, sep, local = self.slot_id.partition(NAMESPACE_SEPARATOR)
        return local if sep else self.slot_id

    @property
    def is_text(self) -> bool:
        return self.kind == SlotKind.TEXT

    def to_record(self) -> dict:
        """Serialize to the slot record exchanged with persistence."""
        record = {
            "slotId": self.slot_id,
            "sourceElement": self.source_element_id,
            "sourceContentId": self.source_persistent_id,
            "type": self.kind.value,
            "boundingBox": self.bounding_box.to_dict(),
            "constraints": self.constraints.to_dict(),
            "styling": self.styling.to_dict(),
            "defaultContent": self.default_content,
            "fieldName": self.field_name,
            "fieldLabel": self.field_label,
            "fieldDescription": self.field_description,
            "required": self.required,
        }
        if self.overflow is not None:
            record["overflow"] = self.overflow.to_dict()
        return record

    @classmethod
    def from_record(cls, record: dict) -> Slot:
        """
        Deserialize from a slot record.

        Records should be checked with
        core.schemas.validator.validate_slot_record first; this method only
        converts.
        """
        kind = SlotKind(record["type"])
        if kind == SlotKind.TEXT:
            constraints: Constraints = TextConstraints.from_dict(record.get("constraints", {}))
            styling: Styling = TextStyling.from_dict(record.get("styling", {}))
        else:
            constraints = ImageConstraints.from_dict(record.get("constraints", {}))
            styling = MediaStyling.from_dict(record.get("styling", {}))
        overflow = record.get("overflow")
        return cls(
            slot_id=record["slotId"],
            source_element_id=record["sourceElement"],
            source_persistent_id=record["sourceContentId"],
            kind=kind,
            bounding_box=BoundingBox.from_dict(record["boundingBox"]),
            constraints=constraints,
            styling=styling,
            field_name=record["fieldName"],
            field_label=record["fieldLabel"],
            default_content=record.get("defaultContent", "") or "",
            field_description=record.get("fieldDescription", "") or "",
            required=bool(record.get("required", False)),
            overflow=Overflow.from_dict(overflow) if overflow else None,
        )


def make_slot_id(namespace: str, local_id: str) -> str:
    """Join a namespace and a local id into a slot id."""
    return f"{namespace}{NAMESPACE_SEPARATOR}{local_id}"
