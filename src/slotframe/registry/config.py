"""
Module: registry.config

Purpose:
    Designer-supplied configuration for turning an element into a slot.

Key Classes:
    - SlotConfig: Field metadata plus constraint overrides (immutable)

Dependencies:
    - dataclasses (std)

Used By:
    - registry.registry: SlotRegistry.create_slot / request_slot

SlotConfig is not validated on construction. The registry validates it
and reports every bad field through ValidationError, so a form can show
all problems at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class SlotConfig:
    """
    Configuration for a new slot (immutable).

    Attributes:
        field_name: Identifier-safe form field name
        field_label: Human readable label
        field_description: Optional help text
        required: Whether a value must be supplied
        kind: 'text' or 'image'; derived from the element when None
        constraints: Overrides of the derived constraints, keyed as on the
            slot record (camelCase, e.g. {"maxCharacters": 50})
        default_content: Override of the element's authored content

    Example:
        >>> config = SlotConfig("headline", "Headline", constraints={"maxCharacters": 50})
    """

    field_name: str
    field_label: str
    field_description: str = ""
    required: bool = False
    kind: Optional[str] = None
    constraints: Mapping[str, Any] = field(default_factory=dict)
    default_content: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SlotConfig:
        """Build from camelCase keys as sent by an editor."""
        return cls(
            field_name=data.get("fieldName", ""),
            field_label=data.get("fieldLabel", ""),
            field_description=data.get("fieldDescription", ""),
            required=bool(data.get("required", False)),
            kind=data.get("type"),
            constraints=dict(data.get("constraints", {})),
            default_content=data.get("defaultContent"),
        )
