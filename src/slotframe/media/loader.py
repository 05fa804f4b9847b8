"""
Module: media.loader

Purpose:
    Asynchronous media decoding. Media references are decoded on a thread
    pool; callers get a Future and may ask for the natural size without
    blocking (None until the decode finishes).

Key Classes:
    - MediaLoader: Thread pool-based decoder with an LRU of decoded media
    - DecodedMedia: Decoded RGBA image plus source format and byte size
    - DecodeError / MediaRejectedError: Decode and constraint failures

Dependencies:
    - concurrent.futures: Thread pool execution
    - PIL.Image: Decoding

Used By:
    - capture.bounds_capture: Natural sizes for media bounds
    - compositor: Base render and image overlays

Media references may be:
    - a filesystem path
    - a data: URL (base64 or percent-encoded)
    - raw encoded bytes
    - an already-decoded PIL image
    - a name registered with register() or reserve()
"""

from __future__ import annotations

import base64
import hashlib
import io
import logging
import threading
import urllib.parse
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from ..core.models.slots import ImageConstraints

logger = logging.getLogger(__name__)

MediaReference = Union[str, bytes, Image.Image]

_FORMAT_ALIASES = {"jpeg": "jpg", "mpo": "jpg"}


class DecodeError(Exception):
    """Media could not be decoded (missing, corrupt or unsupported)."""

    def __init__(self, reference: str, reason: str):
        super().__init__(f"Cannot decode media {reference!r}: {reason}")
        self.reference = reference
        self.reason = reason


class MediaRejectedError(DecodeError):
    """Media decoded but violates an image slot's constraints."""


@dataclass(frozen=True, slots=True)
class DecodedMedia:
    """
    A decoded media item.

    Attributes:
        key: Cache key of the reference
        image: Decoded image in RGBA
        format: Lowercase source format ('jpg', 'png', ...), None if unknown
        byte_size: Encoded size in bytes, None for in-memory images
    """

    key: str
    image: Image.Image
    format: Optional[str] = None
    byte_size: Optional[int] = None

    @property
    def size(self) -> tuple[int, int]:
        """Natural (width, height) in pixels."""
        return self.image.size


def reference_key(reference: MediaReference) -> str:
    """
    Stable cache key for a media reference.

    Paths and names are their own key; data URLs and bytes are hashed;
    in-memory images are keyed by content.
    """
    if isinstance(reference, Image.Image):
        digest = hashlib.sha1(f"{reference.mode}:{reference.size}:".encode("utf-8"))
        digest.update(reference.tobytes())
        return f"image:{digest.hexdigest()}"
    if isinstance(reference, (bytes, bytearray)):
        return f"bytes:{hashlib.sha1(reference).hexdigest()}"
    if reference.startswith("data:"):
        return f"data:{hashlib.sha1(reference.encode('utf-8')).hexdigest()}"
    return reference


def check_constraints(media: DecodedMedia, constraints: ImageConstraints) -> None:
    """
    Check decoded media against image slot constraints.

    Raises:
        MediaRejectedError: Format not allowed or file too large
    """
    allowed = tuple(_FORMAT_ALIASES.get(f.lower(), f.lower()) for f in constraints.allowed_formats)
    if media.format is not None and media.format not in allowed:
        raise MediaRejectedError(media.key, f"format {media.format!r} not in {allowed}")
    if media.byte_size is not None and media.byte_size > constraints.max_file_size:
        raise MediaRejectedError(
            media.key,
            f"{media.byte_size} bytes exceeds limit of {constraints.max_file_size}",
        )


class MediaLoader:
    """
    Thread pool-based media decoder.

    Each reference is decoded once; later requests share the same Future.
    In-memory PIL images are wrapped per request and never cached.
    Decoded media is kept in an LRU of max_entries items.

    Usage:
        with MediaLoader(max_workers=2) as loader:
            future = loader.request("photos/cat.png")
            size = loader.natural_size("photos/cat.png")  # None until decoded
            media = loader.get("photos/cat.png", timeout=5)

    Attributes:
        max_workers: Maximum concurrent decode threads
        max_entries: Maximum decoded items kept
    """

    def __init__(self, max_workers: int = 2, max_entries: int = 64):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="slotframe-decode")
        self._futures: OrderedDict[str, Future] = OrderedDict()
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._enabled = True

    # ─────────────────────────────────────────────────────────────────────────
    # Requests
    # ─────────────────────────────────────────────────────────────────────────

    def request(self, reference: MediaReference) -> Future:
        """
        Start decoding a reference (or join a decode already in flight).

        Returns:
            Future resolving to DecodedMedia or raising DecodeError
        """
        if isinstance(reference, Image.Image):
            # In-memory images are not cached
            future = Future()
            future.set_result(_from_image(reference_key(reference), reference))
            return future

        key = reference_key(reference)
        with self._lock:
            future = self._futures.get(key)
            if future is not None:
                self._futures.move_to_end(key)
                return future

            if not self._enabled:
                # Synchronous fallback
                future = Future()
                try:
                    future.set_result(_decode(key, reference))
                except DecodeError as e:
                    future.set_exception(e)
            else:
                future = self._executor.submit(_decode, key, reference)
            self._store(key, future)
        logger.debug(f"Requested media {key}")
        return future

    def get(self, reference: MediaReference, timeout: Optional[float] = None) -> DecodedMedia:
        """
        Decode a reference, waiting up to timeout seconds.

        Raises:
            DecodeError: If the media cannot be decoded
            concurrent.futures.TimeoutError: If the decode is still running
        """
        return self.request(reference).result(timeout=timeout)

    def natural_size(self, reference: MediaReference) -> Optional[tuple[int, int]]:
        """
        Natural size of a reference without blocking.

        Starts the decode if needed. Returns None while the decode is
        pending or when it failed.
        """
        future = self.request(reference)
        if not future.done() or future.exception() is not None:
            return None
        return future.result().size

    def is_ready(self, reference: MediaReference) -> bool:
        """True once the reference decoded successfully."""
        return self.natural_size(reference) is not None

    # ─────────────────────────────────────────────────────────────────────────
    # Named media
    # ─────────────────────────────────────────────────────────────────────────

    def register(self, name: str, image: Image.Image, *, format: Optional[str] = None) -> None:
        """Make an in-memory image available under a reference name."""
        future: Future = Future()
        future.set_result(_from_image(name, image, format))
        with self._lock:
            self._store(name, future)

    def reserve(self, name: str) -> Future:
        """
        Reserve a reference whose pixels arrive later.

        Until fulfil() or fail() is called the reference is pending:
        natural_size() returns None and get() blocks.
        """
        future: Future = Future()
        with self._lock:
            self._store(name, future)
        return future

    def fulfil(self, name: str, image: Image.Image, *, format: Optional[str] = None) -> None:
        """Complete a reserved reference with its decoded image."""
        self._pending(name).set_result(_from_image(name, image, format))

    def fail(self, name: str, reason: str) -> None:
        """Complete a reserved reference with a decode failure."""
        self._pending(name).set_exception(DecodeError(name, reason))

    def forget(self, reference: MediaReference) -> None:
        """Drop a reference so the next request decodes it again."""
        with self._lock:
            self._futures.pop(reference_key(reference), None)

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def cache_size(self) -> int:
        return len(self._futures)

    def disable(self) -> None:
        """Disable the thread pool (decode synchronously in request())."""
        self._enabled = False

    def shutdown(self) -> None:
        """Shutdown the thread pool."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> MediaLoader:
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()

    def _pending(self, name: str) -> Future:
        with self._lock:
            future = self._futures.get(name)
        if future is None or future.done():
            raise KeyError(f"No pending media reserved as {name!r}")
        return future

    def _store(self, key: str, future: Future) -> None:
        """Insert under the lock, evicting the oldest finished entries."""
        self._futures[key] = future
        self._futures.move_to_end(key)
        while len(self._futures) > self._max_entries:
            oldest_key = next(
                (k for k, f in self._futures.items() if f.done() and k != key),
                None,
            )
            if oldest_key is None:
                break
            del self._futures[oldest_key]
            logger.debug(f"Media cache EVICT: {oldest_key}")


# ─────────────────────────────────────────────────────────────────────────────
# Decoding
# ─────────────────────────────────────────────────────────────────────────────

def _normalize_format(fmt: Optional[str]) -> Optional[str]:
    if not fmt:
        return None
    fmt = fmt.lower()
    return _FORMAT_ALIASES.get(fmt, fmt)


def _from_image(key: str, image: Image.Image, fmt: Optional[str] = None) -> DecodedMedia:
    return DecodedMedia(
        key=key,
        image=image.convert("RGBA"),
        format=_normalize_format(fmt or image.format),
        byte_size=None,
    )


def _read_bytes(key: str, reference: Union[str, bytes]) -> bytes:
    if isinstance(reference, (bytes, bytearray)):
        return bytes(reference)
    if reference.startswith("data:"):
        header, sep, payload = reference.partition(",")
        if not sep:
            raise DecodeError(key, "malformed data URL")
        try:
            if header.endswith(";base64"):
                return base64.b64decode(payload, validate=True)
            return urllib.parse.unquote_to_bytes(payload)
        except ValueError as e:
            raise DecodeError(key, f"malformed data URL payload: {e}") from e
    path = Path(reference)
    if not path.is_file():
        raise DecodeError(key, "file not found")
    return path.read_bytes()


def _decode(key: str, reference: Union[str, bytes]) -> DecodedMedia:
    """Decode a reference into RGBA (runs on the pool)."""
    data = _read_bytes(key, reference)
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            fmt = img.format
            image = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise DecodeError(key, str(e) or type(e).__name__) from e
    logger.debug(f"Decoded media {key}: {image.size[0]}x{image.size[1]} {fmt}")
    return DecodedMedia(key=key, image=image, format=_normalize_format(fmt), byte_size=len(data))
