"""
Module: fitting.text_fitter

Purpose:
    Fit arbitrary text into a fixed box: truncate to the slot's character
    limit, then binary-search the largest integer font size whose greedy
    word-wrap fits the box height.

Key Classes:
    - TextFitter: Size search, wrapping and measurement cache
    - FitResult: Chosen size, wrapped lines and overflow flags
    - FitOverflowWarning: Emitted when even the minimum size overflows

Dependencies:
    - warnings (std)
    - media.fonts.FontResolver
    - placement.text_layout: wrap_words, apply_transform

Used By:
    - compositor.overlay: Text slot overlays

Algorithm:
    low, high = min_size, max_size
    while low <= high:
        mid = (low + high) // 2
        if wrapped(mid) * mid * line_height <= box.height:
            best, low = mid, mid + 1
        else:
            high = mid - 1
    return best (min_size if nothing fits)
"""

from __future__ import annotations

import logging
import threading
import warnings
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.models.geometry import BoundingBox
from ..core.models.slots import DEFAULT_LINE_HEIGHT, TextConstraints, TextStyling
from ..media.fonts import FontResolver, default_resolver
from ..placement.text_layout import apply_transform, wrap_words

logger = logging.getLogger(__name__)

DEFAULT_CACHE_ENTRIES = 4096

_CacheKey = Tuple[str, float, int, str, str, str, bool]


class FitOverflowWarning(UserWarning):
    """Text does not fit its box even at the minimum font size."""


@dataclass(frozen=True)
class FitResult:
    """
    Outcome of fitting text into a box.

    Attributes:
        text: Text actually laid out (truncated and transformed)
        font_size: Chosen size in pixels
        lines: Wrapped lines
        line_pitch: font_size * line_height
        total_height: len(lines) * line_pitch
        truncated: Input was longer than max_characters
        overflow: total_height exceeds the box height
    """

    text: str
    font_size: int
    lines: Tuple[str, ...]
    line_pitch: float
    total_height: float
    truncated: bool = False
    overflow: bool = False


class TextFitter:
    """
    Binary-search text fitter with a wrap cache.

    Wrapping results are cached per (text, box width, font size, family,
    weight, style) so repeated passes over the same value do no layout
    work. The cache is bounded and safe to share between threads.

    Example:
        >>> fitter = TextFitter()
        >>> box = BoundingBox(0, 0, 340, 80)
        >>> size = fitter.find_optimal_font_size("Summer sale", box, 24, 48)
        >>> 24 <= size <= 48
        True
    """

    def __init__(self, fonts: Optional[FontResolver] = None, max_cache_entries: int = DEFAULT_CACHE_ENTRIES):
        self._fonts = fonts or default_resolver()
        self._cache: OrderedDict[_CacheKey, List[str]] = OrderedDict()
        self._max_entries = max_cache_entries
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def fonts(self) -> FontResolver:
        return self._fonts

    # ─────────────────────────────────────────────────────────────────────────
    # Measuring and wrapping
    # ─────────────────────────────────────────────────────────────────────────

    def measure(
        self,
        text: str,
        font_size: int,
        font_family: str = "DejaVu Sans",
        font_weight: str = "normal",
        font_style: str = "normal",
    ) -> float:
        """Advance width of text in pixels."""
        font = self._fonts.resolve(font_family, font_size, font_weight, font_style)
        return font.getlength(text)

    def wrap_text(
        self,
        text: str,
        max_width: float,
        font_size: int,
        font_family: str = "DejaVu Sans",
        font_weight: str = "normal",
        font_style: str = "normal",
        *,
        word_wrap: bool = True,
    ) -> List[str]:
        """
        Greedy word wrap at a font size (cached).

        A word wider than max_width stays whole on its own line.
        """
        key = (text, float(max_width), int(font_size), font_family, font_weight, font_style, word_wrap)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                self.hits += 1
                return list(cached)

        font = self._fonts.resolve(font_family, font_size, font_weight, font_style)
        lines = wrap_words(text, max_width, font.getlength, wrap=word_wrap)

        with self._lock:
            self.misses += 1
            self._cache[key] = lines
            if len(self._cache) > self._max_entries:
                self._cache.popitem(last=False)
        return list(lines)

    def clear_cache(self) -> None:
        """Drop all cached wrap results."""
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # ─────────────────────────────────────────────────────────────────────────
    # Size search
    # ─────────────────────────────────────────────────────────────────────────

    def _fits(
        self,
        text: str,
        box: BoundingBox,
        size: int,
        styling: TextStyling,
        line_height: float,
        word_wrap: bool,
    ) -> bool:
        lines = self.wrap_text(
            text, box.width, size,
            styling.font_family, styling.font_weight, styling.font_style,
            word_wrap=word_wrap,
        )
        return len(lines) * size * line_height <= box.height

    def find_optimal_font_size(
        self,
        text: str,
        box: BoundingBox,
        min_size: int,
        max_size: int,
        styling: Optional[TextStyling] = None,
        *,
        line_height: float = DEFAULT_LINE_HEIGHT,
        word_wrap: bool = True,
    ) -> int:
        """
        Largest integer size in [min_size, max_size] whose wrap fits box.

        Returns min_size when no size fits; the caller decides how to
        report the overflow.

        Raises:
            ValueError: If min_size < 1 or min_size > max_size
        """
        if min_size < 1:
            raise ValueError(f"min_size must be >= 1: {min_size}")
        if min_size > max_size:
            raise ValueError(f"min_size ({min_size}) > max_size ({max_size})")
        styling = styling or TextStyling()

        best = min_size
        low, high = min_size, max_size
        while low <= high:
            mid = (low + high) // 2
            if self._fits(text, box, mid, styling, line_height, word_wrap):
                best = mid
                low = mid + 1
            else:
                high = mid - 1
        return best

    def fit(
        self,
        text: str,
        box: BoundingBox,
        constraints: TextConstraints,
        styling: Optional[TextStyling] = None,
    ) -> FitResult:
        """
        Fit a text value into a slot box.

        Truncates to constraints.max_characters, applies the locked text
        transform, then picks the size (binary search in auto-fit mode,
        max_font_size in fixed mode).

        Warns:
            FitOverflowWarning: If the text overflows at the chosen size
        """
        styling = styling or TextStyling()
        truncated = len(text) > constraints.max_characters
        if truncated:
            logger.debug(f"Truncated {len(text)} chars to {constraints.max_characters}")
            text = text[: constraints.max_characters]
        text = apply_transform(text, styling.text_transform)

        if constraints.font_size_mode == "fixed":
            size = constraints.max_font_size
        else:
            size = self.find_optimal_font_size(
                text, box,
                constraints.min_font_size, constraints.max_font_size,
                styling,
                line_height=constraints.line_height,
                word_wrap=constraints.word_wrap,
            )

        lines = self.wrap_text(
            text, box.width, size,
            styling.font_family, styling.font_weight, styling.font_style,
            word_wrap=constraints.word_wrap,
        )
        pitch = size * constraints.line_height
        total = len(lines) * pitch
        overflow = total > box.height

        if overflow:
            warnings.warn(
                f"Text of {len(text)} chars overflows {box.width:g}x{box.height:g} "
                f"at {size}px ({total:g}px tall)",
                FitOverflowWarning,
                stacklevel=2,
            )

        return FitResult(
            text=text,
            font_size=size,
            lines=tuple(lines),
            line_pitch=pitch,
            total_height=total,
            truncated=truncated,
            overflow=overflow,
        )
