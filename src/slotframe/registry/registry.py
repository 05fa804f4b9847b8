"""
Module: registry.registry

Purpose:
    Creation, validation and storage of slots for one layout instance.

Key Classes:
    - SlotRegistry: create / add / remove / get / update / clear slots,
      deferred creation for pending media, record import and export

Dependencies:
    - capture.bounds_capture: Tight slot boxes
    - core.schemas.validator: Field-level validation
    - core.utils.serialization: Slot records

Used By:
    - Authoring integrations (slot creation)
    - compositor.session: Slots of the active layout

Slot ids are "<namespace>:<persistent_id>". Each registry gets its own
random namespace unless one is given, so two layout instances loaded side
by side never produce colliding ids.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Mapping, Optional

from ..capture.bounds_capture import BoundingBoxCapture, CaptureTimingError, MediaNotReadyError
from ..core.models.elements import ContentElement, ElementKind, LayoutSnapshot, normalize_v_align
from ..core.models.geometry import BoundingBox, Overflow
from ..core.models.slots import (
    DEFAULT_MAX_CHARACTERS,
    DEFAULT_MAX_FONT_SIZE,
    ImageConstraints,
    MediaStyling,
    Slot,
    SlotKind,
    TextConstraints,
    TextStyling,
    make_slot_id,
)
from ..core.schemas.validator import (
    FieldError,
    ValidationError,
    check_field_label,
    check_field_name,
    check_kind,
    collect_slot_errors,
)
from ..core.utils.serialization import deserialize_slot, serialize_slot
from .config import SlotConfig

logger = logging.getLogger(__name__)

# Fields a patch may not change
_IMMUTABLE_FIELDS = ("slot_id", "kind", "source_persistent_id")


def new_namespace() -> str:
    """Random namespace token for a layout instance."""
    return uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class PendingSlot:
    """A slot creation waiting for its media to decode."""

    element: ContentElement
    config: SlotConfig


class SlotRegistry:
    """
    Slot store for one layout instance.

    Usage:
        registry = SlotRegistry(BoundingBoxCapture(loader))
        slot = registry.create_slot(element, SlotConfig("headline", "Headline"))
        registry.add_slot(slot)

    Attributes:
        namespace: Prefix of every slot id created or loaded here
    """

    def __init__(self, capture: BoundingBoxCapture, namespace: Optional[str] = None):
        self._capture = capture
        self.namespace = namespace or new_namespace()
        self._slots: dict[str, Slot] = {}
        self._pending: List[PendingSlot] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, slot_id: str) -> bool:
        return slot_id in self._slots

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.get_all_slots())

    def slot_id_for(self, persistent_id: str) -> str:
        """Slot id this registry gives the element with persistent_id."""
        return make_slot_id(self.namespace, persistent_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Creation
    # ─────────────────────────────────────────────────────────────────────────

    def create_slot(self, element: ContentElement, config: SlotConfig) -> Slot:
        """
        Build a validated slot for an element (not yet stored).

        Args:
            element: Element to make editable
            config: Designer configuration

        Returns:
            New Slot with a tight bounding box

        Raises:
            ValidationError: Bad configuration or constraints
            MediaNotReadyError: Element media not decoded yet
            CaptureTimingError: Element media failed to decode
        """
        kind = self._resolve_kind(element, config)
        self._check_config(config)

        bounds = self._capture.capture(element)
        if bounds is None:
            # Nothing drawn (empty element or blank text): use the content area
            box: BoundingBox = self._capture.content_area(element)
            overflow: Optional[Overflow] = None
        else:
            box, overflow = bounds.box, bounds.overflow

        slot = Slot(
            slot_id=self.slot_id_for(element.persistent_id),
            source_element_id=element.id,
            source_persistent_id=element.persistent_id,
            kind=kind,
            bounding_box=box,
            constraints=self._build_constraints(element, kind, config.constraints),
            styling=self._build_styling(element, kind),
            field_name=config.field_name,
            field_label=config.field_label,
            default_content=self._default_content(element, config),
            field_description=config.field_description,
            required=config.required,
            overflow=overflow,
        )
        errors = collect_slot_errors(slot)
        if errors:
            raise ValidationError.from_field_errors(errors)

        logger.debug(f"Created {kind} slot {slot.slot_id} at {box}")
        return slot

    def request_slot(self, element: ContentElement, config: SlotConfig) -> Optional[Slot]:
        """
        Create and store a slot, deferring it if the element's media is pending.

        Returns:
            The stored Slot, or None if creation was queued; call
            resolve_pending() once the media has loaded

        Raises:
            ValidationError: Bad configuration (reported immediately)
            CaptureTimingError: Element media failed to decode
        """
        self._resolve_kind(element, config)
        self._check_config(config)
        try:
            slot = self.create_slot(element, config)
        except MediaNotReadyError:
            with self._lock:
                self._pending.append(PendingSlot(element, config))
            logger.info(f"Deferred slot for {element.persistent_id}: media still decoding")
            return None
        return self.add_slot(slot)

    def resolve_pending(self, timeout: float = 0.0) -> List[Slot]:
        """
        Retry deferred slot creations.

        Args:
            timeout: Seconds to wait for each pending media decode

        Returns:
            Slots created and stored by this call. Creations whose media is
            still pending stay queued; creations whose media failed to
            decode are dropped and logged.
        """
        with self._lock:
            pending, self._pending = self._pending, []

        created: List[Slot] = []
        still_pending: List[PendingSlot] = []
        for item in pending:
            try:
                if timeout > 0:
                    self._capture.capture_when_ready(item.element, timeout)
                slot = self.create_slot(item.element, item.config)
            except MediaNotReadyError:
                still_pending.append(item)
                continue
            except CaptureTimingError as e:
                logger.warning(f"Dropped deferred slot for {item.element.persistent_id}: {e.reason}")
                continue
            created.append(self.add_slot(slot))

        with self._lock:
            self._pending = still_pending + self._pending
        return created

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ─────────────────────────────────────────────────────────────────────────
    # Storage
    # ─────────────────────────────────────────────────────────────────────────

    def add_slot(self, slot: Slot) -> Slot:
        """
        Store a slot.

        Raises:
            ValidationError: Slot invalid or slot_id already registered
        """
        errors = collect_slot_errors(slot)
        if errors:
            raise ValidationError.from_field_errors(errors)
        with self._lock:
            if slot.slot_id in self._slots:
                raise ValidationError(f"Slot {slot.slot_id} already exists", path="slotId")
            self._slots[slot.slot_id] = slot
        logger.info(f"Added slot {slot.slot_id} ({slot.kind}, field {slot.field_name!r})")
        return slot

    def remove_slot(self, slot_id: str) -> bool:
        """Remove a slot. Returns False if it was not registered."""
        with self._lock:
            removed = self._slots.pop(slot_id, None)
        if removed is not None:
            logger.info(f"Removed slot {slot_id}")
        return removed is not None

    def get_slot(self, slot_id: str) -> Optional[Slot]:
        return self._slots.get(slot_id)

    def get_all_slots(self) -> List[Slot]:
        """All slots in creation order (a copy)."""
        with self._lock:
            return list(self._slots.values())

    def update_slot(self, slot_id: str, patch: Mapping[str, Any]) -> bool:
        """
        Re-configure a slot.

        Args:
            slot_id: Slot to update
            patch: Slot attribute names to new values. "constraints" and
                "styling" may be dicts of record keys merged into the
                current values.

        Returns:
            False if no such slot, True once updated

        Raises:
            ValidationError: The patched slot is invalid (registry unchanged)
        """
        with self._lock:
            current = self._slots.get(slot_id)
            if current is None:
                return False
            updated = _apply_patch(current, patch)
            errors = collect_slot_errors(updated)
            if errors:
                raise ValidationError.from_field_errors(errors)
            self._slots[slot_id] = updated
        logger.info(f"Updated slot {slot_id}: {sorted(patch)}")
        return True

    def clear_slots(self) -> None:
        """Remove every slot and any deferred creations."""
        with self._lock:
            self._slots.clear()
            self._pending.clear()
        logger.info(f"Cleared slots of namespace {self.namespace}")

    # ─────────────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def find_element_by_persistent_id(layout: LayoutSnapshot, persistent_id: str) -> Optional[ContentElement]:
        """Resolve an element in a layout snapshot by persistent id."""
        return layout.find_by_persistent_id(persistent_id)

    def resolve(self, slot: Slot, layout: LayoutSnapshot) -> Optional[ContentElement]:
        """Source element of a slot in the given snapshot."""
        return self.find_element_by_persistent_id(layout, slot.source_persistent_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Records
    # ─────────────────────────────────────────────────────────────────────────

    def to_records(self) -> List[dict]:
        """Slot records for the persistence collaborator."""
        return [serialize_slot(s) for s in self.get_all_slots()]

    def load_records(self, records: Iterable[dict], *, strict: bool = False) -> List[Slot]:
        """
        Load slot records into this registry.

        Ids are re-namespaced into this registry's namespace. Loading is
        all-or-nothing: if any record is invalid nothing is stored.

        Raises:
            ValidationError: Invalid record or duplicate slot id
        """
        loaded: List[Slot] = []
        for index, record in enumerate(records):
            try:
                slot = deserialize_slot(record, strict=strict)
            except ValidationError as e:
                raise ValidationError(
                    f"Slot record {index} is invalid: {e}",
                    path=e.path,
                    errors=e.errors,
                ) from e
            slot = dataclasses.replace(slot, slot_id=self.slot_id_for(slot.local_id))
            errors = collect_slot_errors(slot)
            if errors:
                raise ValidationError.from_field_errors(errors)
            loaded.append(slot)

        with self._lock:
            seen = set(self._slots)
            for slot in loaded:
                if slot.slot_id in seen:
                    raise ValidationError(f"Slot {slot.slot_id} already exists", path="slotId")
                seen.add(slot.slot_id)
            for slot in loaded:
                self._slots[slot.slot_id] = slot
        logger.info(f"Loaded {len(loaded)} slot records into namespace {self.namespace}")
        return loaded

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _resolve_kind(element: ContentElement, config: SlotConfig) -> SlotKind:
        derived = SlotKind.TEXT if element.kind == ElementKind.TEXT else SlotKind.IMAGE
        if config.kind is None:
            return derived
        errors = check_kind(config.kind)
        if errors:
            raise ValidationError.from_field_errors(errors)
        if SlotKind(config.kind) != derived:
            raise ValidationError(
                f"Slot type {config.kind!r} does not match {element.kind} element {element.persistent_id}",
                path="type",
            )
        return derived

    @staticmethod
    def _check_config(config: SlotConfig) -> None:
        errors: List[FieldError] = check_field_name(config.field_name) + check_field_label(config.field_label)
        if errors:
            raise ValidationError.from_field_errors(errors)

    @staticmethod
    def _build_constraints(element: ContentElement, kind: SlotKind, overrides: Mapping[str, Any]):
        if kind == SlotKind.TEXT:
            typography = element.text.typography
            current = typography.font_size
            defaults = TextConstraints(
                max_characters=DEFAULT_MAX_CHARACTERS,
                min_font_size=max(1, math.floor(current * 0.5)),
                max_font_size=max(current, DEFAULT_MAX_FONT_SIZE),
                word_wrap=True,
                horizontal_align=typography.align_h,
                vertical_align=normalize_v_align(typography.align_v),
                line_height=typography.line_height,
            )
        else:
            defaults = ImageConstraints()

        if not overrides:
            return defaults

        known = defaults.to_dict()
        unknown = [key for key in overrides if key not in known]
        if unknown:
            raise ValidationError(
                f"Unknown constraint {unknown[0]!r} for {kind} slot",
                path=f"constraints.{unknown[0]}",
                errors=[f"constraints.{k}: unknown constraint" for k in unknown],
            )
        merged = {**known, **overrides}
        try:
            return type(defaults).from_dict(merged)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid constraints: {e}", path="constraints", errors=[str(e)]) from e

    @staticmethod
    def _build_styling(element: ContentElement, kind: SlotKind):
        if kind == SlotKind.TEXT:
            t = element.text.typography
            return TextStyling(
                font_family=t.font_family,
                font_weight=t.font_weight,
                font_style=t.font_style,
                color=t.color,
                text_align=t.align_h,
                text_transform=t.text_transform,
            )
        if element.media is not None:
            m = element.media
            return MediaStyling(align_h=m.align_h, align_v=normalize_v_align(m.align_v), scale=m.scale)
        return MediaStyling()

    @staticmethod
    def _default_content(element: ContentElement, config: SlotConfig) -> str:
        if config.default_content is not None:
            return config.default_content
        if element.text is not None:
            return element.text.text
        if element.media is not None:
            return element.media.reference
        return ""


def _apply_patch(slot: Slot, patch: Mapping[str, Any]) -> Slot:
    """Slot with patch applied; raises ValidationError for bad keys."""
    fields = {f.name for f in dataclasses.fields(Slot)}
    changes: dict[str, Any] = {}
    for key, value in patch.items():
        if key not in fields:
            raise ValidationError(f"Unknown slot attribute {key!r}", path=key)
        if key in _IMMUTABLE_FIELDS and value != getattr(slot, key):
            raise ValidationError(f"Slot attribute {key!r} cannot be changed", path=key)
        if key in ("constraints", "styling") and isinstance(value, Mapping):
            current = getattr(slot, key)
            known = current.to_dict()
            unknown = [k for k in value if k not in known]
            if unknown:
                raise ValidationError(
                    f"Unknown {key} key {unknown[0]!r}",
                    path=f"{key}.{unknown[0]}",
                )
            try:
                value = type(current).from_dict({**known, **value})
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Invalid {key}: {e}", path=key, errors=[str(e)]) from e
        changes[key] = value
    try:
        return dataclasses.replace(slot, **changes)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid slot update: {e}", errors=[str(e)]) from e
