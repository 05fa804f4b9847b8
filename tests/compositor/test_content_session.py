"""
Tests for ContentSession

Test Coverage:
- Initial load and debounced passes on value changes
- Bursts of edits composite once
- Clearing values restores authored content
- Page switching keeps values scoped to their layout instance
"""

import itertools

import pytest

from conftest import text_element
from slotframe.compositor import CompositorConfig, ContentSession
from slotframe.core.models import LayoutSnapshot
from slotframe.registry import SlotConfig, SlotRegistry

BLUE = (0, 0, 255, 255)
RED = (255, 0, 0, 255)
FAST = CompositorConfig(debounce_seconds=0.05)


@pytest.fixture
def page_slots(registry, sample_layout):
    for pid, label in (("headline", "Headline"), ("photo", "Photo")):
        element = sample_layout.find_by_persistent_id(pid)
        registry.add_slot(registry.create_slot(element, SlotConfig(pid, label)))
    return registry.get_all_slots()


@pytest.fixture
def results():
    return []


@pytest.fixture
def session(compositor, sample_layout, page_slots, results):
    with ContentSession(compositor, sample_layout, page_slots, config=FAST, on_composite=results.append) as s:
        yield s


def test_load_runs_initial_pass(session, results):
    result = session.load()

    assert results == [result]
    assert result.hidden_element_ids == frozenset()
    assert session.surface is result.surface


def test_set_value_composites_after_debounce(session, results):
    # Arrange
    session.load()

    # Act
    session.set_value("page0:photo", "blue")
    assert session.wait(2.0)

    # Assert
    assert len(results) == 2
    assert session.surface.getpixel((200, 300)) == BLUE


def test_burst_of_edits_composites_once(session, results):
    session.load()

    for text in ("S", "Su", "Sum", "Summ"):
        session.set_value("page0:headline", text)
    session.wait(2.0)

    assert len(results) == 2
    assert results[-1].fit_results["page0:headline"].text == "Summ"


def test_set_value_unknown_slot_raises(session):
    with pytest.raises(KeyError, match="Unknown slot"):
        session.set_value("page9:photo", "blue")


def test_flush_runs_pending_pass_now(session):
    session.set_value("page0:photo", "blue")
    result = session.flush()
    assert result.surface.getpixel((200, 300)) == BLUE


def test_clear_value_restores_authored_content(session):
    session.set_values({"page0:photo": "blue", "page0:headline": "New"})
    session.flush()

    session.clear_value("page0:photo")
    session.flush()

    assert session.surface.getpixel((200, 300)) == RED
    assert session.values == {"page0:headline": "New"}


def test_clear_values_without_values_schedules_nothing(session):
    session.clear_values()
    assert session.scheduler.pending is False


def test_switch_layout_keeps_values_scoped(session, capture, results):
    # Arrange
    session.set_value("page0:photo", "blue")
    session.flush()
    counter = itertools.count()
    page1 = LayoutSnapshot(
        800, 600,
        elements=(text_element("headline", "Page two"),),
        layout_id="page1",
    ).rebuild(lambda: f"p1-{next(counter)}")
    registry = SlotRegistry(capture, namespace="page1")
    slot = registry.add_slot(registry.create_slot(page1.elements[0], SlotConfig("headline", "Headline")))

    # Act
    result = session.switch_layout(page1, [slot])

    # Assert
    assert result.layout_id == "page1"
    assert result.overlaid_slot_ids == ()
    assert "page0:photo" in session.values
    assert session.layout is page1


def test_close_cancels_pending_pass(compositor, sample_layout, page_slots, results):
    session = ContentSession(
        compositor, sample_layout, page_slots,
        config=CompositorConfig(debounce_seconds=5.0), on_composite=results.append,
    )
    session.set_value("page0:photo", "blue")
    session.close()

    assert session.scheduler.pending is False
    assert results == []
