"""
Tests for Record Serialization

Test Coverage:
- serialize_slot / deserialize_slot with validation
- JSON text helpers for slots and layouts
- Invalid input raises ValidationError instead of being coerced
"""

import json

import pytest

from slotframe.core.models import (
    BoundingBox,
    ContentElement,
    ElementKind,
    LayoutSnapshot,
    Slot,
    SlotKind,
    TextConstraints,
    TextPayload,
    TextStyling,
)
from slotframe.core.schemas import ValidationError
from slotframe.core.utils import (
    deserialize_layout,
    deserialize_slot,
    layout_from_json,
    layout_to_json,
    serialize_slot,
    slots_from_json,
    slots_to_json,
)


@pytest.fixture
def slot():
    return Slot(
        slot_id="ns:headline",
        source_element_id="el-1",
        source_persistent_id="headline",
        kind=SlotKind.TEXT,
        bounding_box=BoundingBox(12, 8, 316, 64),
        constraints=TextConstraints(max_characters=50, min_font_size=24, max_font_size=48),
        styling=TextStyling(color="#ff0000"),
        field_name="headline",
        field_label="Headline",
        default_content="Summer Sale",
        required=True,
    )


def test_deserialize_slot_restores_serialized_slot(slot):
    assert deserialize_slot(serialize_slot(slot)) == slot


def test_deserialize_slot_rejects_invalid_record(slot):
    record = serialize_slot(slot)
    record["boundingBox"]["width"] = 0
    with pytest.raises(ValidationError) as exc_info:
        deserialize_slot(record)
    assert exc_info.value.path == "boundingBox.width"


def test_slots_json_text_survives_encoding(slot):
    text = slots_to_json([slot], indent=2)
    assert json.loads(text)[0]["slotId"] == "ns:headline"
    assert slots_from_json(text) == [slot]


def test_slots_from_json_rejects_object():
    with pytest.raises(ValidationError, match="must be an array"):
        slots_from_json('{"slotId": "x"}')


def test_slots_from_json_rejects_malformed_json():
    with pytest.raises(ValidationError, match="Invalid slot JSON"):
        slots_from_json("[{")


def test_slots_from_json_reports_failing_record_index(slot):
    good = serialize_slot(slot)
    bad = dict(good, fieldName="not valid")
    with pytest.raises(ValidationError, match="Error parsing record 1") as exc_info:
        slots_from_json(json.dumps([good, bad]))
    assert exc_info.value.path == "fieldName"


def test_layout_json_text_survives_encoding():
    layout = LayoutSnapshot(
        width=1080,
        height=1080,
        elements=(
            ContentElement(
                "e1", "title", ElementKind.TEXT, BoundingBox(0, 0, 500, 100),
                text=TextPayload("Hello"),
            ),
            ContentElement(
                "e2", "panel", ElementKind.EMPTY, BoundingBox(0, 100, 500, 100),
                fill_color="#eeeeee",
            ),
        ),
        background_color="#000000",
        layout_id="page1",
    )
    assert layout_from_json(layout_to_json(layout)) == layout


def test_deserialize_layout_rejects_element_without_persistent_id():
    data = {
        "canvas": {"width": 10, "height": 10},
        "elements": [{"id": "a", "kind": "empty", "container": {"x": 0, "y": 0, "width": 1, "height": 1}}],
    }
    with pytest.raises(ValidationError) as exc_info:
        deserialize_layout(data)
    assert exc_info.value.path == "elements[0]"
