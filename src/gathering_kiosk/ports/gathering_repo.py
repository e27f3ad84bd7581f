"""Gathering repository interface."""

from typing import Protocol

from gathering_kiosk.core.gatherings import Gathering


class GatheringRepository(Protocol):
    """Interface for fetching gathering configuration from any backend."""

    def list_gatherings(self) -> list[Gathering]:
        """Fetch all gatherings."""
        ...

    def get_gathering(self, gathering_id: int) -> Gathering | None:
        """Fetch a single gathering. Returns None if not found."""
        ...
