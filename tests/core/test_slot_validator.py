"""
Tests for Slot Validation

Test Coverage:
- Field-level errors name the offending field (ValidationError.path)
- collect_slot_errors reports every problem at once
- Record checks, with and without the JSON Schema strict mode
- Layout record checks
"""

import dataclasses

import pytest

from slotframe.core.models import (
    BoundingBox,
    ImageConstraints,
    MediaStyling,
    Slot,
    SlotKind,
    TextConstraints,
    TextStyling,
)
from slotframe.core.schemas import (
    ValidationError,
    collect_slot_errors,
    validate_layout_record,
    validate_slot,
    validate_slot_record,
)


@pytest.fixture
def slot():
    return Slot(
        slot_id="ns:headline",
        source_element_id="el-1",
        source_persistent_id="headline",
        kind=SlotKind.TEXT,
        bounding_box=BoundingBox(0, 0, 340, 80),
        constraints=TextConstraints(),
        styling=TextStyling(),
        field_name="headline",
        field_label="Headline",
    )


@pytest.fixture
def record(slot):
    return slot.to_record()


class TestCollectSlotErrors:
    """Tests for collect_slot_errors() / validate_slot()."""

    def test_collect_when_valid_then_empty(self, slot):
        assert collect_slot_errors(slot) == []
        validate_slot(slot)

    @pytest.mark.parametrize("name", ["", "1st", "head line", "head-line", "émoji"])
    def test_validate_when_field_name_not_identifier_then_path_is_field_name(self, slot, name):
        with pytest.raises(ValidationError) as exc_info:
            validate_slot(dataclasses.replace(slot, field_name=name))
        assert exc_info.value.path == "fieldName"

    def test_validate_when_label_blank_then_path_is_field_label(self, slot):
        with pytest.raises(ValidationError) as exc_info:
            validate_slot(dataclasses.replace(slot, field_label="  "))
        assert exc_info.value.path == "fieldLabel"

    def test_validate_when_zero_height_box_then_path_is_box_height(self, slot):
        with pytest.raises(ValidationError) as exc_info:
            validate_slot(dataclasses.replace(slot, bounding_box=BoundingBox(0, 0, 10, 0)))
        assert exc_info.value.path == "boundingBox.height"

    def test_validate_when_min_above_max_then_path_is_max_font_size(self, slot):
        bad = dataclasses.replace(slot, constraints=TextConstraints(min_font_size=50, max_font_size=40))
        with pytest.raises(ValidationError) as exc_info:
            validate_slot(bad)
        assert exc_info.value.path == "constraints.maxFontSize"

    def test_collect_when_several_problems_then_reports_all(self, slot):
        bad = dataclasses.replace(
            slot,
            field_name="9",
            field_label="",
            constraints=TextConstraints(max_characters=0, font_size_mode="shrink"),
        )
        paths = [e.path for e in collect_slot_errors(bad)]
        assert paths == ["fieldName", "fieldLabel", "constraints.maxCharacters", "constraints.fontSizeMode"]

        with pytest.raises(ValidationError) as exc_info:
            validate_slot(bad)
        assert len(exc_info.value.errors) == 4

    def test_collect_when_constraints_do_not_match_kind_then_error(self, slot):
        bad = dataclasses.replace(slot, constraints=ImageConstraints())
        assert [e.path for e in collect_slot_errors(bad)] == ["constraints"]

    def test_collect_when_image_formats_empty_then_error(self):
        image_slot = Slot(
            slot_id="ns:photo",
            source_element_id="el-2",
            source_persistent_id="photo",
            kind=SlotKind.IMAGE,
            bounding_box=BoundingBox(0, 0, 10, 10),
            constraints=ImageConstraints(allowed_formats=()),
            styling=MediaStyling(),
            field_name="photo",
            field_label="Photo",
        )
        assert [e.path for e in collect_slot_errors(image_slot)] == ["constraints.allowedFormats"]


class TestValidateSlotRecord:
    """Tests for validate_slot_record()."""

    def test_validate_when_valid_then_passes_strict(self, record):
        validate_slot_record(record, strict=True)

    def test_validate_when_missing_fields_then_lists_them(self, record):
        del record["fieldName"]
        del record["boundingBox"]
        with pytest.raises(ValidationError) as exc_info:
            validate_slot_record(record)
        assert "Missing field: fieldName" in exc_info.value.errors
        assert "Missing field: boundingBox" in exc_info.value.errors

    def test_validate_when_unknown_type_then_path_is_type(self, record):
        record["type"] = "video"
        with pytest.raises(ValidationError, match="Invalid slot type") as exc_info:
            validate_slot_record(record)
        assert exc_info.value.path == "type"

    def test_validate_when_width_not_number_then_path_is_box_width(self, record):
        record["boundingBox"]["width"] = "wide"
        with pytest.raises(ValidationError) as exc_info:
            validate_slot_record(record)
        assert exc_info.value.path == "boundingBox.width"

    def test_validate_when_strict_and_required_not_bool_then_schema_error(self, record):
        record["required"] = "yes"
        validate_slot_record(record)  # basic checks do not look at it
        with pytest.raises(ValidationError, match="Schema validation failed") as exc_info:
            validate_slot_record(record, strict=True)
        assert exc_info.value.path == "required"


class TestValidateLayoutRecord:
    """Tests for validate_layout_record()."""

    def test_validate_when_no_canvas_then_path_is_canvas(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_layout_record({"elements": []})
        assert exc_info.value.path == "canvas"

    def test_validate_when_element_kind_unknown_then_path_points_at_element(self):
        data = {
            "canvas": {"width": 10, "height": 10},
            "elements": [{"id": "a", "persistentId": "pa", "kind": "shape", "container": {}}],
        }
        with pytest.raises(ValidationError) as exc_info:
            validate_layout_record(data)
        assert exc_info.value.path == "elements[0].kind"

    def test_validate_when_media_element_without_payload_then_error(self):
        data = {
            "canvas": {"width": 10, "height": 10},
            "elements": [{"id": "a", "persistentId": "pa", "kind": "media", "container": {}}],
        }
        with pytest.raises(ValidationError, match="media payload"):
            validate_layout_record(data)
