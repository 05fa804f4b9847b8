"""
Tests for BoundingBoxCapture

Test Coverage:
- Text bounds come from ink and are tighter than the container
- Blank text and empty elements have no bounds
- Media bounds follow the renderer's placement, overflow included
- Capture timing: pending, late-arriving and failed media
"""

import pytest
from PIL import Image

from conftest import empty_element, media_element, text_element
from slotframe.capture import (
    BoundingBoxCapture,
    CaptureTimingError,
    MediaNotReadyError,
)
from slotframe.core.models import BoundingBox, Overflow


class TestTextCapture:
    """Tests for text element capture."""

    def test_capture_when_single_word_container_then_box_narrower_than_container(self, capture, fonts):
        """A container sized to the advance width must not be reported as the text box."""
        # Arrange
        font = fonts.resolve("DejaVu Sans", 48)
        container = BoundingBox(60, 80, font.getlength("EMPLOYEE"), 48 * 1.2)
        element = text_element("title", "EMPLOYEE", container, font_size=48)

        # Act
        bounds = capture.capture(element)

        # Assert
        box = bounds.box
        assert box.x >= container.x
        assert box.y >= container.y
        assert box.height < container.height
        assert box.area <= 0.99 * container.area
        assert bounds.overflow is None

    @pytest.mark.parametrize("font_size", [48, 56, 64])
    def test_capture_when_employee_in_wide_container_then_box_hugs_text(self, capture, font_size):
        container = BoundingBox(120, 200, 531.6, 74)
        element = text_element("title", "EMPLOYEE", container, font_size=font_size)

        box = capture.capture(element).box

        assert box.width <= 531.6
        assert box.x >= container.x
        assert box.y >= container.y
        assert box.area <= 0.99 * container.area

    def test_capture_when_wrapped_then_box_inside_container(self, capture):
        container = BoundingBox(0, 0, 200, 300)
        element = text_element("body", "several short words that must wrap", container, font_size=24)

        box = capture.capture(element).box

        assert container.contains_box(box)
        assert box.height > 24

    def test_capture_when_left_aligned_then_box_starts_near_left_edge(self, capture):
        container = BoundingBox(100, 0, 600, 100)
        left = capture.capture(text_element("a", "Hello", container, font_size=32, align_h="left")).box
        right = capture.capture(text_element("b", "Hello", container, font_size=32, align_h="right")).box

        assert left.x < container.x + 10
        assert right.right > container.right - 10
        assert left.width == pytest.approx(right.width, abs=1)

    def test_capture_when_blank_text_then_none(self, capture):
        assert capture.capture(text_element(text="   ")) is None

    def test_capture_when_empty_element_then_none(self, capture):
        assert capture.capture(empty_element()) is None


class TestMediaCapture:
    """Tests for media element capture."""

    def test_capture_when_fit_then_contained_rect(self, capture):
        bounds = capture.capture(media_element())
        assert bounds.box == BoundingBox(100, 250, 200, 100)
        assert bounds.overflow is None

    def test_capture_when_scaled_past_container_then_overflow_reported(self, capture):
        bounds = capture.capture(media_element(scale=1.5))
        assert bounds.box == BoundingBox(50, 225, 300, 150)
        assert bounds.overflow == Overflow(left=50, right=50)

    def test_capture_when_padding_then_placed_in_content_area(self, capture):
        bounds = capture.capture(media_element(reference="blue", padding=20))
        assert bounds.box == BoundingBox(120, 220, 160, 160)


class TestCaptureTiming:
    """Tests for capture before, during and after media decoding."""

    def test_capture_when_media_pending_then_not_ready(self, capture, loader):
        loader.reserve("late")
        with pytest.raises(MediaNotReadyError, match="not decoded yet"):
            capture.capture(media_element(reference="late"))

    def test_capture_when_media_arrives_later_then_succeeds(self, capture, loader):
        # Arrange
        loader.reserve("late")
        element = media_element(reference="late")
        with pytest.raises(MediaNotReadyError):
            capture.capture(element)

        # Act
        loader.fulfil("late", Image.new("RGBA", (200, 100), "red"))
        bounds = capture.capture(element)

        # Assert
        assert bounds.box == BoundingBox(100, 250, 200, 100)

    def test_capture_when_ready_times_out_then_timing_error(self, capture, loader):
        loader.reserve("late")
        with pytest.raises(CaptureTimingError, match="still decoding"):
            capture.capture_when_ready(media_element(reference="late"), timeout=0.01)

    def test_capture_when_decode_failed_then_timing_error_not_retryable(self, capture, loader):
        loader.reserve("broken")
        loader.fail("broken", "corrupt upload")
        with pytest.raises(CaptureTimingError) as exc_info:
            capture.capture(media_element(reference="broken"))
        assert not isinstance(exc_info.value, MediaNotReadyError)

    def test_capture_when_ready_then_waits_for_file_decode(self, capture, sample_image):
        bounds = capture.capture_when_ready(media_element(reference=str(sample_image)), timeout=5)
        assert bounds.box == BoundingBox(100, 250, 200, 100)


def test_content_area_insets_padding():
    element = text_element(box=BoundingBox(0, 0, 100, 100), padding=10)
    assert BoundingBoxCapture.content_area(element) == BoundingBox(10, 10, 80, 80)
