"""
Compositor Package

Base rendering, hide-then-overlay compositing and debounced sessions.
"""

from .compositor import (
    CompositeResult,
    CompositorState,
    IssueKind,
    LayoutCompositor,
    ResolutionError,
    SlotIssue,
)
from .config import CompositorConfig
from .overlay import image_placement, overlay_image, overlay_text
from .renderer import LayoutRenderer
from .scheduler import DebouncedScheduler
from .session import ContentSession

__all__ = [
    "CompositeResult",
    "CompositorState",
    "IssueKind",
    "LayoutCompositor",
    "ResolutionError",
    "SlotIssue",
    "CompositorConfig",
    "image_placement",
    "overlay_image",
    "overlay_text",
    "LayoutRenderer",
    "DebouncedScheduler",
    "ContentSession",
]
