"""
Module: media.fonts

Purpose:
    Resolve (family, weight, style, size) to a Pillow font. The same
    resolver instance is shared by the renderer, capture and the fitter so
    measurement and drawing always use the same face.

Key Classes:
    - FontResolver: Cached font lookup with fallbacks

Dependencies:
    - PIL.ImageFont

Used By:
    - placement.text_layout
    - fitting.text_fitter
    - capture.bounds_capture
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Dict, List, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)

# Filename stems per family: (regular, bold, italic, bold italic)
_KNOWN_FAMILIES: Dict[str, Tuple[str, str, str, str]] = {
    "dejavu sans": ("DejaVuSans", "DejaVuSans-Bold", "DejaVuSans-Oblique", "DejaVuSans-BoldOblique"),
    "dejavu serif": ("DejaVuSerif", "DejaVuSerif-Bold", "DejaVuSerif-Italic", "DejaVuSerif-BoldItalic"),
    "arial": ("arial", "arialbd", "ariali", "arialbi"),
    "helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "liberation sans": (
        "LiberationSans-Regular", "LiberationSans-Bold",
        "LiberationSans-Italic", "LiberationSans-BoldItalic",
    ),
    "times new roman": ("times", "timesbd", "timesi", "timesbi"),
}

_FALLBACK_FAMILY = "dejavu sans"

Font = ImageFont.FreeTypeFont

DEFAULT_MAX_FONTS = 256


def _variant_index(weight: str, style: str) -> int:
    bold = weight == "bold"
    italic = style == "italic"
    return (2 if italic else 0) + (1 if bold else 0)


def font_candidates(family: str, weight: str = "normal", style: str = "normal") -> List[str]:
    """
    Font filenames to try, best match first.

    The requested family comes first, then the same variant of the
    fallback family, then plain regular faces.
    """
    index = _variant_index(weight, style)
    key = family.strip().lower()
    candidates: List[str] = []

    stems = _KNOWN_FAMILIES.get(key)
    if stems is not None:
        candidates.append(f"{stems[index]}.ttf")
    else:
        compact = family.replace(" ", "")
        suffix = ("", "-Bold", "-Italic", "-BoldItalic")[index]
        candidates.extend([f"{compact}{suffix}.ttf", f"{family}.ttf"])

    fallback = _KNOWN_FAMILIES[_FALLBACK_FAMILY]
    candidates.extend([f"{fallback[index]}.ttf", "arial.ttf", "Arial.ttf", f"{fallback[0]}.ttf"])

    return list(dict.fromkeys(candidates))


class FontResolver:
    """
    Cached font lookup (LRU, bounded by max_entries).

    Falls back to Pillow's bundled default font when no candidate file is
    installed. Each fallback is logged once per family/variant.

    Example:
        >>> fonts = FontResolver()
        >>> font = fonts.resolve("DejaVu Sans", 32, weight="bold")
        >>> font.getlength("EMPLOYEE") > 0
        True
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_FONTS):
        self._cache: OrderedDict[Tuple[str, int, str, str], Font] = OrderedDict()
        self._max_entries = max_entries
        self._warned: set = set()
        self._lock = threading.Lock()

    def resolve(self, family: str, size: int, weight: str = "normal", style: str = "normal") -> Font:
        """
        Font for a family at an integer pixel size.

        Args:
            family: Family name
            size: Pixel size (>= 1)
            weight: 'normal' or 'bold'
            style: 'normal' or 'italic'
        """
        size = max(1, int(size))
        key = (family.lower(), size, weight, style)
        with self._lock:
            font = self._cache.get(key)
            if font is not None:
                self._cache.move_to_end(key)
                return font
            font = self._load(family, size, weight, style)
            self._cache[key] = font
            if len(self._cache) > self._max_entries:
                self._cache.popitem(last=False)
        return font

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def _load(self, family: str, size: int, weight: str, style: str) -> Font:
        candidates = font_candidates(family, weight, style)
        for i, font_name in enumerate(candidates):
            try:
                font = ImageFont.truetype(font_name, size)
            except (IOError, OSError):
                continue
            if i > 0:
                self._warn_once(family, weight, style, f"using {font_name}")
            return font

        self._warn_once(family, weight, style, "using Pillow default font")
        return ImageFont.load_default(size=size)

    def _warn_once(self, family: str, weight: str, style: str, detail: str) -> None:
        marker = (family.lower(), weight, style)
        if marker in self._warned:
            return
        self._warned.add(marker)
        logger.warning(f"Font {family!r} ({weight}/{style}) not found, {detail}")


_default_resolver = FontResolver()


def default_resolver() -> FontResolver:
    """Process-wide resolver shared by components created without one."""
    return _default_resolver
