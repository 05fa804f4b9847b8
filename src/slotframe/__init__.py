"""Top-level package for slotframe.

Renders frozen visual layouts and substitutes end-user content into
designated editable regions (slots).

Provides subpackages:
- slotframe.core – data models, record validation and serialization
- slotframe.media – asynchronous media decoding and font resolution
- slotframe.placement – media placement and text line layout
- slotframe.fitting – text auto-fitting
- slotframe.capture – tight bounding-box capture
- slotframe.registry – slot registry
- slotframe.compositor – base renderer, compositor and debounced sessions
"""


def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    # In dev mode, read directly from pyproject.toml
    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
        except OSError:
            content = ""
        for line in content.splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.1.0"
                return line.split("=")[1].strip().strip('"').strip("'")

    # Fallback to importlib.metadata for installed package
    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("slotframe")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

from .capture import BoundingBoxCapture, CapturedBounds, CaptureTimingError, MediaNotReadyError  # noqa: E402
from .compositor import (  # noqa: E402
    CompositeResult,
    CompositorConfig,
    CompositorState,
    ContentSession,
    LayoutCompositor,
    LayoutRenderer,
    ResolutionError,
)
from .core.models import (  # noqa: E402
    BoundingBox,
    ContentElement,
    ElementKind,
    FillMode,
    LayoutSnapshot,
    MediaPayload,
    Slot,
    SlotKind,
    TextPayload,
    Typography,
)
from .core.schemas import ValidationError  # noqa: E402
from .fitting import FitOverflowWarning, FitResult, TextFitter  # noqa: E402
from .media import DecodeError, FontResolver, MediaLoader  # noqa: E402
from .registry import SlotConfig, SlotRegistry  # noqa: E402

__all__: list[str] = [
    "__version__",
    "BoundingBox",
    "BoundingBoxCapture",
    "CaptureTimingError",
    "CapturedBounds",
    "CompositeResult",
    "CompositorConfig",
    "CompositorState",
    "ContentElement",
    "ContentSession",
    "DecodeError",
    "ElementKind",
    "FillMode",
    "FitOverflowWarning",
    "FitResult",
    "FontResolver",
    "LayoutCompositor",
    "LayoutRenderer",
    "LayoutSnapshot",
    "MediaLoader",
    "MediaNotReadyError",
    "MediaPayload",
    "ResolutionError",
    "Slot",
    "SlotConfig",
    "SlotKind",
    "SlotRegistry",
    "TextFitter",
    "TextPayload",
    "Typography",
    "ValidationError",
]
