import pytest
import sys
from pathlib import Path
from PIL import Image

# Add src to sys.path so we can import slotframe
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from slotframe.capture import BoundingBoxCapture  # noqa: E402
from slotframe.compositor import CompositorConfig, LayoutCompositor, LayoutRenderer  # noqa: E402
from slotframe.core.models import (  # noqa: E402
    BoundingBox,
    ContentElement,
    ElementKind,
    FillMode,
    LayoutSnapshot,
    MediaPayload,
    TextPayload,
    Typography,
)
from slotframe.fitting import TextFitter  # noqa: E402
from slotframe.media import FontResolver, MediaLoader  # noqa: E402
from slotframe.registry import SlotRegistry  # noqa: E402


# ─────────────────────────────────────────────────────────────────────────────
# Element builders
# ─────────────────────────────────────────────────────────────────────────────

def text_element(
    persistent_id: str = "headline",
    text: str = "Summer Sale",
    box: BoundingBox = BoundingBox(40, 40, 400, 120),
    **typography,
) -> ContentElement:
    return ContentElement(
        id=f"el-{persistent_id}",
        persistent_id=persistent_id,
        kind=ElementKind.TEXT,
        container=box,
        text=TextPayload(text, Typography(**typography)),
    )


def media_element(
    persistent_id: str = "photo",
    reference: str = "red",
    box: BoundingBox = BoundingBox(100, 200, 200, 200),
    fill_mode: FillMode = FillMode.FIT,
    **media,
) -> ContentElement:
    return ContentElement(
        id=f"el-{persistent_id}",
        persistent_id=persistent_id,
        kind=ElementKind.MEDIA,
        container=box,
        media=MediaPayload(reference, fill_mode=fill_mode, **media),
    )


def empty_element(
    persistent_id: str = "blank",
    box: BoundingBox = BoundingBox(500, 40, 200, 100),
    fill_color: str | None = "#dddddd",
) -> ContentElement:
    return ContentElement(
        id=f"el-{persistent_id}",
        persistent_id=persistent_id,
        kind=ElementKind.EMPTY,
        container=box,
        fill_color=fill_color,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Common test fixtures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def fonts():
    """Shared font resolver."""
    return FontResolver()


@pytest.fixture
def loader():
    """Media loader with a few named solid-color images."""
    media = MediaLoader(max_workers=2)
    media.register("red", Image.new("RGBA", (100, 50), "red"), format="png")
    media.register("blue", Image.new("RGBA", (100, 100), "blue"), format="png")
    media.register("tall", Image.new("RGBA", (300, 600), "green"), format="png")
    yield media
    media.shutdown()


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image on disk."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def sample_layout():
    """800x600 layout with a text, a media and an empty element."""
    return LayoutSnapshot(
        width=800,
        height=600,
        elements=(text_element(), media_element(), empty_element()),
        layout_id="page0",
    )


@pytest.fixture
def capture(loader, fonts):
    return BoundingBoxCapture(loader, fonts)


@pytest.fixture
def registry(capture):
    return SlotRegistry(capture, namespace="page0")


@pytest.fixture
def fitter(fonts):
    return TextFitter(fonts)


@pytest.fixture
def renderer(loader, fonts):
    return LayoutRenderer(loader, fonts)


@pytest.fixture
def compositor(renderer, fitter, loader):
    return LayoutCompositor(renderer, fitter, loader, CompositorConfig(media_timeout_seconds=2.0))
