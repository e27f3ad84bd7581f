"""Ports - interfaces/protocols for external dependencies."""

from .gathering_repo import GatheringRepository
from .clock import Clock

__all__ = [
    "GatheringRepository",
    "Clock",
]
