"""
Serialization Utilities

to/from dict helpers for the records exchanged with the persistence
collaborator: slot records and layout snapshot records.

- `serialize_*` / `deserialize_*` pairs wrap the models' own
  to_record()/to_dict() and from_record()/from_dict()
- Records are validated before deserialization
- JSON text helpers are provided for collaborators that store strings;
  nothing here touches the filesystem
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from ..models.elements import LayoutSnapshot
from ..models.slots import Slot
from ..schemas.validator import ValidationError, validate_layout_record, validate_slot_record


# ─────────────────────────────────────────────────────────────────────────────
# Slot Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_slot(slot: Slot) -> dict[str, Any]:
    """
    Serialize a Slot to a slot record.

    Args:
        slot: Slot instance to serialize

    Returns:
        Dictionary suitable for JSON serialization
    """
    return slot.to_record()


def deserialize_slot(data: dict[str, Any], *, validate: bool = True, strict: bool = False) -> Slot:
    """
    Deserialize a Slot from a slot record.

    Args:
        data: Slot record
        validate: Whether to validate the record first
        strict: Also validate against the JSON Schema

    Returns:
        Slot instance

    Raises:
        ValidationError: If validate=True and the record is invalid
    """
    if validate:
        validate_slot_record(data, strict=strict)
    try:
        return Slot.from_record(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(
            f"Cannot parse slot record {data.get('slotId', '?')}: {e}",
            path=data.get("slotId", ""),
            errors=[str(e)],
        ) from e


def serialize_slots(slots: Iterable[Slot]) -> list[dict[str, Any]]:
    return [serialize_slot(s) for s in slots]


def deserialize_slots(records: Iterable[dict[str, Any]], *, validate: bool = True) -> list[Slot]:
    """Deserialize several slot records; the first invalid record raises."""
    return [deserialize_slot(r, validate=validate) for r in records]


# ─────────────────────────────────────────────────────────────────────────────
# Layout Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_layout(layout: LayoutSnapshot) -> dict[str, Any]:
    """Serialize a LayoutSnapshot to a layout record."""
    return layout.to_dict()


def deserialize_layout(data: dict[str, Any], *, validate: bool = True) -> LayoutSnapshot:
    """
    Deserialize a LayoutSnapshot from a layout record.

    Raises:
        ValidationError: If the record is invalid
    """
    if validate:
        validate_layout_record(data)
    try:
        return LayoutSnapshot.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(
            f"Cannot parse layout record {data.get('layoutId', '')!r}: {e}",
            path="elements",
            errors=[str(e)],
        ) from e


# ─────────────────────────────────────────────────────────────────────────────
# JSON Text Utilities
# ─────────────────────────────────────────────────────────────────────────────

def slots_to_json(slots: Iterable[Slot], *, indent: int | None = None) -> str:
    """Encode slots as a JSON array of slot records."""
    return json.dumps(serialize_slots(slots), ensure_ascii=False, indent=indent)


def slots_from_json(text: str, *, validate: bool = True) -> list[Slot]:
    """
    Decode a JSON array of slot records.

    Raises:
        ValidationError: If the text is not a JSON array or a record is invalid
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid slot JSON: {e}", errors=[str(e)]) from e
    if not isinstance(data, list):
        raise ValidationError("Slot JSON must be an array of slot records")

    slots = []
    for index, record in enumerate(data):
        try:
            slots.append(deserialize_slot(record, validate=validate))
        except ValidationError as e:
            raise ValidationError(
                f"Error parsing record {index}: {e}",
                path=e.path,
                errors=e.errors or [str(e)],
            ) from e
    return slots


def layout_to_json(layout: LayoutSnapshot, *, indent: int | None = None) -> str:
    return json.dumps(serialize_layout(layout), ensure_ascii=False, indent=indent)


def layout_from_json(text: str, *, validate: bool = True) -> LayoutSnapshot:
    """Decode a layout record from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid layout JSON: {e}", errors=[str(e)]) from e
    return deserialize_layout(data, validate=validate)
