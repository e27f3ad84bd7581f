"""Adapters - I/O implementations of ports."""

from .file_gatherings import FileGatheringRepository
from .system_clock import SystemClock

__all__ = [
    "FileGatheringRepository",
    "SystemClock",
]
