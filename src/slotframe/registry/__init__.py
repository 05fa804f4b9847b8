"""
Registry Package

Slot creation, validation and storage per layout instance.
"""

from .config import SlotConfig
from .registry import PendingSlot, SlotRegistry, new_namespace

__all__ = ["SlotConfig", "PendingSlot", "SlotRegistry", "new_namespace"]
