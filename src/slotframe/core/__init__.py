"""
slotframe Core Package

Shared data models, record validation and serialization. These models are
the single source of truth for every other slotframe module.

1. **Immutable Data Models**
   - Layout snapshots, elements and slots are frozen dataclasses
   - Changes produce new instances (dataclasses.replace)

2. **Identifiers, Not References**
   - Slots point at elements by persistent id only
   - Elements are resolved against the snapshot on every pass

3. **Field-Level Errors**
   - ValidationError.path names the offending field
"""

from .models import BoundingBox, ContentElement, LayoutSnapshot, Overflow, Slot, SlotKind
from .schemas import ValidationError

__all__ = [
    "BoundingBox",
    "ContentElement",
    "LayoutSnapshot",
    "Overflow",
    "Slot",
    "SlotKind",
    "ValidationError",
]
