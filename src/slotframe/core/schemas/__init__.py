"""
Schemas Package

Record validation with field-level errors.
"""

from .validator import (
    FIELD_NAME_PATTERN,
    SLOT_RECORD_SCHEMA,
    FieldError,
    ValidationError,
    collect_slot_errors,
    validate_layout_record,
    validate_slot,
    validate_slot_record,
)

__all__ = [
    "FIELD_NAME_PATTERN",
    "SLOT_RECORD_SCHEMA",
    "FieldError",
    "ValidationError",
    "collect_slot_errors",
    "validate_layout_record",
    "validate_slot",
    "validate_slot_record",
]
