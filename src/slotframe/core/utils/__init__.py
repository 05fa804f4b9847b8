"""
Utils Package

Record serialization helpers.
"""

from .serialization import (
    deserialize_layout,
    deserialize_slot,
    deserialize_slots,
    layout_from_json,
    layout_to_json,
    serialize_layout,
    serialize_slot,
    serialize_slots,
    slots_from_json,
    slots_to_json,
)

__all__ = [
    "deserialize_layout",
    "deserialize_slot",
    "deserialize_slots",
    "layout_from_json",
    "layout_to_json",
    "serialize_layout",
    "serialize_slot",
    "serialize_slots",
    "slots_from_json",
    "slots_to_json",
]
