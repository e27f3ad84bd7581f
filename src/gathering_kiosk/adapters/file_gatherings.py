"""File-based gathering configuration adapter."""

import json
import logging
from pathlib import Path

from gathering_kiosk.core.gatherings import Gathering, GatheringError

logger = logging.getLogger(__name__)


class FileGatheringRepository:
    """
    Gatherings read from a JSON export of the attendance API.

    Implements GatheringRepository protocol. The file holds either a list of
    gathering objects or the API's list response, {"gatherings": [...]}.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load_raw(self) -> list[dict]:
        """Read the raw gathering payloads from disk."""
        if not self.path.exists():
            raise GatheringError(f"Gatherings file not found: {self.path}")
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise GatheringError(f"Invalid JSON in {self.path}: {e}")

        if isinstance(data, dict):
            data = data.get("gatherings", [])
        if not isinstance(data, list):
            raise GatheringError(f"Expected a list of gatherings in {self.path}")
        return data

    def list_gatherings(self) -> list[Gathering]:
        """Parse all gatherings, skipping entries that cannot be used."""
        gatherings = []
        for item in self.load_raw():
            try:
                gatherings.append(Gathering.from_api(item))
            except GatheringError as e:
                logger.warning(f"Skipping gathering in {self.path.name}: {e}")
                continue
        return gatherings

    def get_gathering(self, gathering_id: int) -> Gathering | None:
        for gathering in self.list_gatherings():
            if gathering.id == gathering_id:
                return gathering
        return None
