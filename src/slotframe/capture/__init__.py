"""
Capture Package

Tight bounding-box measurement of rendered content.
"""

from .bounds_capture import BoundingBoxCapture, CapturedBounds, CaptureTimingError, MediaNotReadyError

__all__ = ["BoundingBoxCapture", "CapturedBounds", "CaptureTimingError", "MediaNotReadyError"]
