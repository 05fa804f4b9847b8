"""
Unit Tests for Layout Elements

Tests for ContentElement payload invariants and LayoutSnapshot lookups.
"""

import itertools

import pytest

from slotframe.core.models import (
    BoundingBox,
    ContentElement,
    ElementKind,
    FillMode,
    LayoutSnapshot,
    MediaPayload,
    TextPayload,
    Typography,
)

BOX = BoundingBox(0, 0, 100, 50)


class TestContentElement:
    """Tests for ContentElement dataclass."""

    def test_init_when_text_kind_without_payload_then_raises_error(self):
        with pytest.raises(ValueError, match="must carry only a text payload"):
            ContentElement("a", "pa", ElementKind.TEXT, BOX)

    def test_init_when_media_kind_with_text_then_raises_error(self):
        with pytest.raises(ValueError, match="must carry only a media payload"):
            ContentElement(
                "a", "pa", ElementKind.MEDIA, BOX,
                text=TextPayload("x"), media=MediaPayload("img"),
            )

    def test_init_when_empty_kind_with_payload_then_raises_error(self):
        with pytest.raises(ValueError, match="cannot carry a payload"):
            ContentElement("a", "pa", ElementKind.EMPTY, BOX, media=MediaPayload("img"))

    def test_init_when_missing_persistent_id_then_raises_error(self):
        with pytest.raises(ValueError, match="no persistent_id"):
            ContentElement("a", "", ElementKind.EMPTY, BOX)

    def test_has_content_when_blank_text_then_false(self):
        element = ContentElement("a", "pa", ElementKind.TEXT, BOX, text=TextPayload("   "))
        assert element.has_content is False

    def test_typography_when_invalid_alignment_then_raises_error(self):
        with pytest.raises(ValueError, match="align_h"):
            Typography(align_h="justify")

    def test_typography_when_center_vertical_alignment_then_accepted(self):
        assert Typography(align_v="center").align_v == "center"

    def test_fill_mode_parse_when_legacy_fill_then_cover(self):
        assert FillMode.parse("fill") is FillMode.COVER
        assert FillMode.parse("free") is FillMode.FREE


class TestLayoutSnapshot:
    """Tests for LayoutSnapshot lookups and rebuilds."""

    def _layout(self):
        return LayoutSnapshot(
            width=200,
            height=100,
            elements=(
                ContentElement("e1", "title", ElementKind.TEXT, BOX, text=TextPayload("Hi")),
                ContentElement("e2", "photo", ElementKind.MEDIA, BOX, media=MediaPayload("img")),
            ),
            layout_id="page0",
        )

    def test_find_by_persistent_id_when_present_then_returns_element(self):
        layout = self._layout()
        assert layout.find_by_persistent_id("photo").id == "e2"
        assert layout.find_by_persistent_id("missing") is None

    def test_init_when_duplicate_ids_then_raises_error(self):
        element = ContentElement("e1", "a", ElementKind.EMPTY, BOX)
        other = ContentElement("e1", "b", ElementKind.EMPTY, BOX)
        with pytest.raises(ValueError, match="duplicate element id"):
            LayoutSnapshot(10, 10, elements=(element, other))

    def test_init_when_zero_canvas_then_raises_error(self):
        with pytest.raises(ValueError, match="positive size"):
            LayoutSnapshot(0, 10)

    def test_rebuild_when_called_then_ids_change_and_persistent_ids_stay(self):
        layout = self._layout()
        counter = itertools.count()
        rebuilt = layout.rebuild(lambda: f"new-{next(counter)}")

        assert [e.id for e in rebuilt] == ["new-0", "new-1"]
        assert [e.persistent_id for e in rebuilt] == ["title", "photo"]
        assert rebuilt.find_by_id("e1") is None
        assert rebuilt.find_by_persistent_id("title").id == "new-0"

    def test_without_when_called_then_original_unchanged(self):
        layout = self._layout()
        smaller = layout.without("photo")
        assert len(smaller) == 1
        assert len(layout) == 2

    def test_from_dict_when_serialized_then_equal(self):
        layout = self._layout()
        assert LayoutSnapshot.from_dict(layout.to_dict()) == layout
