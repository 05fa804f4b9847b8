"""
Tests for Image Placement

Test Coverage:
- cover() crops the source to the box aspect, around the focal point
- fit() contains, scales and aligns
- free() / stretch() / place() dispatch
- rotated_bounds() and draw_media() clipping
"""

import pytest
from PIL import Image

from slotframe.core.models import BoundingBox, FillMode
from slotframe.placement.image_placer import (
    Placement,
    cover,
    draw_media,
    fit,
    free,
    place,
    rotated_bounds,
    stretch,
)

SQUARE = BoundingBox(0, 0, 400, 400)


class TestCover:
    """Tests for cover()."""

    def test_cover_when_taller_than_box_then_crops_top_and_bottom(self):
        placement = cover((300, 600), SQUARE)
        assert placement.dest == SQUARE
        assert placement.source == BoundingBox(0, 150, 300, 300)

    def test_cover_when_wider_than_box_then_crops_sides(self):
        placement = cover((600, 300), SQUARE)
        assert placement.source == BoundingBox(150, 0, 300, 300)

    def test_cover_when_focal_point_top_then_keeps_top(self):
        assert cover((300, 600), SQUARE, focal_point="top").source == BoundingBox(0, 0, 300, 300)

    def test_cover_when_source_aspect_then_matches_box(self):
        box = BoundingBox(10, 10, 320, 180)
        source = cover((1000, 1000), box).source
        assert source.width / source.height == pytest.approx(box.width / box.height)

    def test_cover_when_media_size_zero_then_raises_error(self):
        with pytest.raises(ValueError, match="media size must be positive"):
            cover((0, 10), SQUARE)


class TestFit:
    """Tests for fit()."""

    def test_fit_when_wide_media_then_full_width_centered(self):
        placement = fit((100, 50), BoundingBox(100, 200, 200, 200))
        assert placement.dest == BoundingBox(100, 250, 200, 100)
        assert placement.source is None

    def test_fit_when_aligned_top_left_then_at_origin(self):
        placement = fit((100, 50), BoundingBox(100, 200, 200, 200), h_align="left", v_align="top")
        assert (placement.dest.x, placement.dest.y) == (100, 200)

    def test_fit_when_scaled_up_then_overflows_box(self):
        box = BoundingBox(0, 0, 100, 100)
        placement = fit((100, 100), box, scale=1.5)
        assert placement.dest == BoundingBox(-25, -25, 150, 150)
        assert placement.dest.overflow_beyond(box).left == 25

    def test_fit_when_center_vertical_alignment_then_same_as_middle(self):
        box = BoundingBox(0, 0, 100, 300)
        assert fit((100, 100), box, v_align="center") == fit((100, 100), box, v_align="middle")


def test_free_uses_natural_size_times_scale():
    placement = free((40, 20), BoundingBox(0, 0, 100, 100), scale=2, h_align="right", v_align="bottom")
    assert placement.dest == BoundingBox(20, 60, 80, 40)


def test_stretch_fills_box():
    assert stretch((10, 500), SQUARE) == Placement(dest=SQUARE)


@pytest.mark.parametrize("mode", list(FillMode))
def test_place_dispatches_every_fill_mode(mode):
    placement = place((300, 600), SQUARE, mode)
    assert placement.dest.width > 0


def test_rotated_bounds_quarter_turn_swaps_extent():
    bounds = rotated_bounds(BoundingBox(0, 0, 100, 50), 90)
    assert bounds.width == pytest.approx(50)
    assert bounds.height == pytest.approx(100)
    assert bounds.center == pytest.approx((50, 25))


def test_rotated_bounds_full_turn_is_identity():
    box = BoundingBox(1, 2, 3, 4)
    assert rotated_bounds(box, 360) is box


class TestDrawMedia:
    """Tests for draw_media()."""

    def test_draw_when_inside_canvas_then_pixels_painted(self):
        canvas = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
        image = Image.new("RGBA", (10, 10), "red")
        drawn = draw_media(canvas, image, fit((10, 10), BoundingBox(10, 10, 20, 20)))

        assert drawn == BoundingBox(10, 10, 20, 20)
        assert canvas.getpixel((20, 20)) == (255, 0, 0, 255)
        assert canvas.getpixel((5, 5)) == (0, 0, 0, 0)

    def test_draw_when_clip_given_then_nothing_outside_clip(self):
        canvas = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
        image = Image.new("RGBA", (10, 10), "red")
        drawn = draw_media(
            canvas, image, fit((10, 10), BoundingBox(0, 0, 20, 20)),
            clip=BoundingBox(0, 0, 10, 20),
        )

        assert drawn == BoundingBox(0, 0, 10, 20)
        assert canvas.getpixel((5, 5)) == (255, 0, 0, 255)
        assert canvas.getpixel((15, 5)) == (0, 0, 0, 0)

    def test_draw_when_outside_canvas_then_none(self):
        canvas = Image.new("RGBA", (50, 50))
        image = Image.new("RGBA", (10, 10), "red")
        assert draw_media(canvas, image, Placement(dest=BoundingBox(60, 60, 10, 10))) is None

    def test_draw_when_cover_source_then_draws_cropped_region(self):
        # Arrange: top half blue, bottom half green
        image = Image.new("RGBA", (100, 200), "blue")
        image.paste((0, 255, 0, 255), (0, 100, 100, 200))
        canvas = Image.new("RGBA", (100, 100))

        # Act
        draw_media(canvas, image, cover((100, 200), BoundingBox(0, 0, 100, 100), focal_point="bottom"))

        # Assert
        assert canvas.getpixel((50, 50)) == (0, 255, 0, 255)
