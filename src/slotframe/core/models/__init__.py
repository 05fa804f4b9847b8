"""
Core Models Package

Immutable, validated data models shared by every stage of a compositing
pass: layout geometry, frozen layout elements and editable slots.

All models are frozen dataclasses. Rendering and compositing therefore
never mutate a layout snapshot or a slot; a pass that hides an element
does so by passing a set of element ids, not by editing the element.
"""

from .geometry import BoundingBox, Overflow
from .elements import (
    ContentElement,
    ElementKind,
    FillMode,
    LayoutSnapshot,
    MediaPayload,
    TextPayload,
    Typography,
)
from .slots import (
    ImageConstraints,
    ImageFitMode,
    MediaStyling,
    Slot,
    SlotKind,
    TextConstraints,
    TextStyling,
    make_slot_id,
)

__all__ = [
    "BoundingBox",
    "Overflow",
    "ContentElement",
    "ElementKind",
    "FillMode",
    "LayoutSnapshot",
    "MediaPayload",
    "TextPayload",
    "Typography",
    "ImageConstraints",
    "ImageFitMode",
    "MediaStyling",
    "Slot",
    "SlotKind",
    "TextConstraints",
    "TextStyling",
    "make_slot_id",
]
