"""
Module: compositor.config

Purpose:
    Configuration for compositing passes and the debounced session.

Key Classes:
    - CompositorConfig: Immutable compositor configuration

Dependencies:
    - dataclasses (std)

Used By:
    - compositor.compositor: LayoutCompositor
    - compositor.session: ContentSession
"""

from __future__ import annotations

from dataclasses import dataclass

from ..placement.text_layout import BASELINE_RATIO

DEFAULT_DEBOUNCE_SECONDS = 0.3
DEFAULT_MEDIA_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class CompositorConfig:
    """
    Configuration for compositing (immutable).

    Attributes:
        debounce_seconds: Quiet period after the last edit before a pass
        media_timeout_seconds: Longest wait for a media decode in a pass
        clip_overlay: Clip replacement content to the slot bounding box
        baseline_ratio: Baseline offset of each line, in line pitches
        media_workers: Decode threads of a loader built by LayoutCompositor.from_config()

    Example:
        >>> config = CompositorConfig(debounce_seconds=0.05)
        >>> config.debounce_ms
        50
    """

    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    media_timeout_seconds: float = DEFAULT_MEDIA_TIMEOUT_SECONDS
    clip_overlay: bool = True
    baseline_ratio: float = BASELINE_RATIO
    media_workers: int = 2

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be >= 0: {self.debounce_seconds}")
        if self.media_timeout_seconds <= 0:
            raise ValueError(f"media_timeout_seconds must be positive: {self.media_timeout_seconds}")
        if not 0 < self.baseline_ratio <= 1:
            raise ValueError(f"baseline_ratio must be in (0, 1]: {self.baseline_ratio}")
        if self.media_workers < 1:
            raise ValueError(f"media_workers must be >= 1: {self.media_workers}")

    @property
    def debounce_ms(self) -> int:
        """Debounce delay in whole milliseconds."""
        return int(round(self.debounce_seconds * 1000))
