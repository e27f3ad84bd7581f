"""Clock interface."""

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current time, injected so core logic stays deterministic."""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...
