"""
Schema Validation Utilities

Validates slots, slot records and layout records.

Every failure names the offending field: ValidationError.path is a dotted
path into the record ("boundingBox.width", "constraints.minFontSize") and
ValidationError.errors lists every problem found, so callers can show all
of them at once. Invalid input is rejected, never coerced into a guess.

Basic structural checks always run. Strict mode additionally validates
records against the JSON Schema below with jsonschema.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable

import jsonschema

from ..models.elements import H_ALIGNMENTS, TEXT_TRANSFORMS, V_ALIGNMENTS, normalize_v_align
from ..models.slots import (
    FOCAL_POINTS,
    FONT_SIZE_MODES,
    ImageConstraints,
    MediaStyling,
    Slot,
    SlotKind,
    TextConstraints,
    TextStyling,
)

FIELD_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

SLOT_KINDS = tuple(kind.value for kind in SlotKind)
ELEMENT_KINDS = ("text", "media", "empty")

_BOX_SCHEMA = {
    "type": "object",
    "required": ["x", "y", "width", "height"],
    "properties": {
        "x": {"type": "number"},
        "y": {"type": "number"},
        "width": {"type": "number", "exclusiveMinimum": 0},
        "height": {"type": "number", "exclusiveMinimum": 0},
    },
}

SLOT_RECORD_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Slot record",
    "type": "object",
    "required": [
        "slotId", "sourceElement", "sourceContentId", "type", "boundingBox",
        "constraints", "styling", "fieldName", "fieldLabel",
    ],
    "properties": {
        "slotId": {"type": "string", "minLength": 1},
        "sourceElement": {"type": "string"},
        "sourceContentId": {"type": "string", "minLength": 1},
        "type": {"enum": list(SLOT_KINDS)},
        "boundingBox": _BOX_SCHEMA,
        "constraints": {"type": "object"},
        "styling": {"type": "object"},
        "defaultContent": {"type": "string"},
        "fieldName": {"type": "string", "pattern": FIELD_NAME_PATTERN.pattern},
        "fieldLabel": {"type": "string", "minLength": 1},
        "fieldDescription": {"type": "string"},
        "required": {"type": "boolean"},
        "overflow": {
            "type": "object",
            "properties": {
                edge: {"type": "number", "minimum": 0}
                for edge in ("left", "right", "top", "bottom")
            },
        },
    },
}


class ValidationError(Exception):
    """Raised when a slot, slot configuration or record is invalid."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []

    @classmethod
    def from_field_errors(cls, field_errors: Iterable[FieldError]) -> ValidationError:
        """Build one error from several field errors, keyed on the first."""
        field_errors = list(field_errors)
        first = field_errors[0]
        return cls(
            f"Invalid {first.path}: {first.reason}",
            path=first.path,
            errors=[str(e) for e in field_errors],
        )


@dataclass(frozen=True, slots=True)
class FieldError:
    """One invalid field: where and why."""

    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


# ─────────────────────────────────────────────────────────────────────────────
# Field checks
# ─────────────────────────────────────────────────────────────────────────────

def check_field_name(name: Any) -> list[FieldError]:
    """fieldName must be a non-empty, identifier-safe string."""
    if not isinstance(name, str) or not name.strip():
        return [FieldError("fieldName", "cannot be empty")]
    if not FIELD_NAME_PATTERN.match(name):
        return [FieldError(
            "fieldName",
            f"{name!r} is not identifier-safe (letters, digits, underscore; no leading digit)",
        )]
    return []


def check_field_label(label: Any) -> list[FieldError]:
    """fieldLabel must be a non-empty string."""
    if not isinstance(label, str) or not label.strip():
        return [FieldError("fieldLabel", "cannot be empty")]
    return []


def check_kind(kind: Any) -> list[FieldError]:
    """Slot kind is closed to text and image."""
    value = kind.value if isinstance(kind, SlotKind) else kind
    if value not in SLOT_KINDS:
        return [FieldError("type", f"unsupported kind {value!r} (must be one of {SLOT_KINDS})")]
    return []


def check_bounding_box(box: Any, path: str = "boundingBox") -> list[FieldError]:
    """A slot box must have positive width and height."""
    errors = []
    if box is None:
        return [FieldError(path, "missing")]
    if box.width <= 0:
        errors.append(FieldError(f"{path}.width", f"must be > 0 (got {box.width})"))
    if box.height <= 0:
        errors.append(FieldError(f"{path}.height", f"must be > 0 (got {box.height})"))
    return errors


def check_text_constraints(c: TextConstraints, path: str = "constraints") -> list[FieldError]:
    """Range and enum checks for text constraints."""
    errors = []
    if c.max_characters <= 0:
        errors.append(FieldError(f"{path}.maxCharacters", f"must be > 0 (got {c.max_characters})"))
    if c.font_size_mode not in FONT_SIZE_MODES:
        errors.append(FieldError(f"{path}.fontSizeMode", f"must be one of {FONT_SIZE_MODES}"))
    if c.min_font_size < 1:
        errors.append(FieldError(f"{path}.minFontSize", f"must be >= 1 (got {c.min_font_size})"))
    if c.max_font_size < c.min_font_size:
        errors.append(FieldError(
            f"{path}.maxFontSize",
            f"must be >= minFontSize ({c.max_font_size} < {c.min_font_size})",
        ))
    if c.horizontal_align not in H_ALIGNMENTS:
        errors.append(FieldError(f"{path}.horizontalAlign", f"must be one of {H_ALIGNMENTS}"))
    if normalize_v_align(c.vertical_align) not in V_ALIGNMENTS:
        errors.append(FieldError(f"{path}.verticalAlign", f"must be one of {V_ALIGNMENTS}"))
    if c.line_height <= 0:
        errors.append(FieldError(f"{path}.lineHeight", f"must be > 0 (got {c.line_height})"))
    return errors


def check_image_constraints(c: ImageConstraints, path: str = "constraints") -> list[FieldError]:
    """Range and enum checks for image constraints."""
    errors = []
    if c.max_file_size <= 0:
        errors.append(FieldError(f"{path}.maxFileSize", f"must be > 0 (got {c.max_file_size})"))
    if not c.allowed_formats:
        errors.append(FieldError(f"{path}.allowedFormats", "cannot be empty"))
    if c.focal_point not in FOCAL_POINTS:
        errors.append(FieldError(f"{path}.focalPoint", f"must be one of {FOCAL_POINTS}"))
    return errors


def check_text_styling(s: TextStyling, path: str = "styling") -> list[FieldError]:
    errors = []
    if not s.font_family:
        errors.append(FieldError(f"{path}.fontFamily", "cannot be empty"))
    if s.text_align not in H_ALIGNMENTS:
        errors.append(FieldError(f"{path}.textAlign", f"must be one of {H_ALIGNMENTS}"))
    if s.text_transform not in TEXT_TRANSFORMS:
        errors.append(FieldError(f"{path}.textTransform", f"must be one of {TEXT_TRANSFORMS}"))
    return errors


# ─────────────────────────────────────────────────────────────────────────────
# Slot validation
# ─────────────────────────────────────────────────────────────────────────────

def collect_slot_errors(slot: Slot) -> list[FieldError]:
    """
    Check every field of a slot.

    Args:
        slot: Slot to check

    Returns:
        All field errors found (empty list when valid)
    """
    errors: list[FieldError] = []
    if not slot.slot_id or not slot.slot_id.strip():
        errors.append(FieldError("slotId", "cannot be empty"))
    if not slot.source_persistent_id:
        errors.append(FieldError("sourceContentId", "cannot be empty"))
    errors.extend(check_kind(slot.kind))
    errors.extend(check_bounding_box(slot.bounding_box))
    errors.extend(check_field_name(slot.field_name))
    errors.extend(check_field_label(slot.field_label))

    if slot.kind == SlotKind.TEXT:
        if isinstance(slot.constraints, TextConstraints):
            errors.extend(check_text_constraints(slot.constraints))
        else:
            errors.append(FieldError("constraints", "text slot requires text constraints"))
        if isinstance(slot.styling, TextStyling):
            errors.extend(check_text_styling(slot.styling))
        else:
            errors.append(FieldError("styling", "text slot requires text styling"))
    elif slot.kind == SlotKind.IMAGE:
        if isinstance(slot.constraints, ImageConstraints):
            errors.extend(check_image_constraints(slot.constraints))
        else:
            errors.append(FieldError("constraints", "image slot requires image constraints"))
        if not isinstance(slot.styling, MediaStyling):
            errors.append(FieldError("styling", "image slot requires media styling"))
    return errors


def validate_slot(slot: Slot) -> None:
    """
    Validate a slot.

    Raises:
        ValidationError: Naming the first invalid field; errors lists all
    """
    errors = collect_slot_errors(slot)
    if errors:
        raise ValidationError.from_field_errors(errors)


# ─────────────────────────────────────────────────────────────────────────────
# Record validation
# ─────────────────────────────────────────────────────────────────────────────

def validate_slot_record(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a slot record from the persistence collaborator.

    Args:
        data: Slot record dictionary
        strict: If True, also validate against SLOT_RECORD_SCHEMA

    Raises:
        ValidationError: If data is invalid
    """
    required = SLOT_RECORD_SCHEMA["required"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path=missing[0],
            errors=[f"Missing field: {f}" for f in missing],
        )

    if data["type"] not in SLOT_KINDS:
        raise ValidationError(
            f"Invalid slot type: {data['type']!r} (must be one of {SLOT_KINDS})",
            path="type",
        )

    box = data["boundingBox"]
    if not isinstance(box, dict):
        raise ValidationError("boundingBox must be a dict", path="boundingBox")
    for key in ("x", "y", "width", "height"):
        value = box.get(key)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValidationError(
                f"boundingBox.{key} must be a number (got {value!r})",
                path=f"boundingBox.{key}",
            )
    for key in ("width", "height"):
        if box[key] <= 0:
            raise ValidationError(
                f"Invalid bounding box: {key} must be > 0 (got {box[key]})",
                path=f"boundingBox.{key}",
            )

    field_errors = check_field_name(data["fieldName"]) + check_field_label(data["fieldLabel"])
    if field_errors:
        raise ValidationError.from_field_errors(field_errors)

    if strict:
        try:
            jsonschema.validate(data, SLOT_RECORD_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ValidationError(
                f"Schema validation failed: {e.message}",
                path=".".join(str(p) for p in e.absolute_path),
                errors=[e.message],
            ) from e


def validate_layout_record(data: dict[str, Any]) -> None:
    """
    Validate a layout snapshot record.

    Raises:
        ValidationError: If data is invalid
    """
    canvas = data.get("canvas")
    if not isinstance(canvas, dict) or "width" not in canvas or "height" not in canvas:
        raise ValidationError("canvas must have width and height", path="canvas")

    elements = data.get("elements", [])
    if not isinstance(elements, list):
        raise ValidationError("elements must be a list", path="elements")

    for i, element in enumerate(elements):
        path = f"elements[{i}]"
        missing = [f for f in ("id", "persistentId", "kind", "container") if f not in element]
        if missing:
            raise ValidationError(
                f"Element missing required fields: {missing}",
                path=path,
                errors=[f"Missing field: {f}" for f in missing],
            )
        if element["kind"] not in ELEMENT_KINDS:
            raise ValidationError(
                f"Invalid element kind: {element['kind']!r}",
                path=f"{path}.kind",
            )
        if element["kind"] == "text" and not isinstance(element.get("text"), dict):
            raise ValidationError("text element requires a text payload", path=f"{path}.text")
        if element["kind"] == "media" and not isinstance(element.get("media"), dict):
            raise ValidationError("media element requires a media payload", path=f"{path}.media")
