"""
Unit Tests for BoundingBox and Overflow

Tests for the rectangle model shared by containers, captured bounds and slots.
"""

import pytest

from slotframe.core.models.geometry import BoundingBox, Overflow


class TestBoundingBox:
    """Tests for BoundingBox dataclass."""

    # ─────────────────────────────────────────────────────────────────────────
    # Constructor Tests
    # ─────────────────────────────────────────────────────────────────────────

    def test_init_when_valid_then_creates_box(self):
        """Valid extents should be accepted, negative origin included."""
        box = BoundingBox(-10, 20, 100, 50)
        assert box.right == 90
        assert box.bottom == 70

    def test_init_when_negative_width_then_raises_error(self):
        with pytest.raises(ValueError, match="width must be >= 0"):
            BoundingBox(0, 0, -1, 10)

    def test_init_when_negative_height_then_raises_error(self):
        with pytest.raises(ValueError, match="height must be >= 0"):
            BoundingBox(0, 0, 10, -1)

    # ─────────────────────────────────────────────────────────────────────────
    # Geometry Tests
    # ─────────────────────────────────────────────────────────────────────────

    def test_union_when_disjoint_then_covers_both(self):
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(20, 5, 10, 20)
        assert a.union(b) == BoundingBox(0, 0, 30, 25)

    def test_union_all_when_empty_then_returns_none(self):
        assert BoundingBox.union_all([]) is None

    def test_inset_when_padding_exceeds_size_then_clamps_to_empty(self):
        box = BoundingBox(0, 0, 10, 10).inset(8)
        assert box.width == 0
        assert box.is_empty

    def test_contains_box_when_inside_then_true(self):
        outer = BoundingBox(0, 0, 100, 100)
        assert outer.contains_box(BoundingBox(10, 10, 90, 90))
        assert not outer.contains_box(BoundingBox(10, 10, 91, 90))

    def test_overflow_beyond_when_inside_then_none(self):
        container = BoundingBox(0, 0, 100, 100)
        assert BoundingBox(10, 10, 50, 50).overflow_beyond(container) is None

    def test_overflow_beyond_when_larger_then_reports_each_edge(self):
        container = BoundingBox(0, 0, 100, 100)
        overflow = BoundingBox(-25, -10, 150, 120).overflow_beyond(container)
        assert overflow == Overflow(left=25, right=25, top=10, bottom=10)

    # ─────────────────────────────────────────────────────────────────────────
    # Rounding Tests
    # ─────────────────────────────────────────────────────────────────────────

    def test_to_pixels_when_fractional_then_rounds_edges_independently(self):
        box = BoundingBox(10.4, 20.6, 30.2, 10.0)
        assert box.to_pixels() == (10, 21, 41, 31)
        assert box.pixel_size() == (31, 10)

    def test_to_pixels_when_adjacent_boxes_then_share_boundary(self):
        left = BoundingBox(0, 0, 10.5, 10)
        right = BoundingBox(10.5, 0, 10, 10)
        assert left.to_pixels()[2] == right.to_pixels()[0]

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization Tests
    # ─────────────────────────────────────────────────────────────────────────

    def test_from_dict_when_ints_then_floats(self):
        box = BoundingBox.from_dict({"x": 1, "y": 2, "width": 3, "height": 4})
        assert box == BoundingBox(1.0, 2.0, 3.0, 4.0)
        assert box.to_dict() == {"x": 1.0, "y": 2.0, "width": 3.0, "height": 4.0}


class TestOverflow:
    """Tests for Overflow dataclass."""

    def test_init_when_negative_then_raises_error(self):
        with pytest.raises(ValueError, match="overflow left must be >= 0"):
            Overflow(left=-1)

    def test_any_when_all_zero_then_false(self):
        assert Overflow().any is False
        assert Overflow(bottom=0.5).any is True
