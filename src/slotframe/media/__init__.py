"""
Media Package

Asynchronous media decoding and font resolution.
"""

from .fonts import FontResolver, default_resolver
from .loader import (
    DecodedMedia,
    DecodeError,
    MediaLoader,
    MediaRejectedError,
    check_constraints,
    reference_key,
)

__all__ = [
    "FontResolver",
    "default_resolver",
    "DecodedMedia",
    "DecodeError",
    "MediaLoader",
    "MediaRejectedError",
    "check_constraints",
    "reference_key",
]
