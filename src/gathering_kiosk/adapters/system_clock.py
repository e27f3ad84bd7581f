"""System clock adapter."""

from datetime import date, datetime
from zoneinfo import ZoneInfo


class SystemClock:
    """
    Wall-clock time.

    Implements Clock protocol. With a timezone, returns aware datetimes in
    that zone; otherwise naive local time.
    """

    def __init__(self, timezone: str | None = None):
        self.timezone = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def today(self) -> date:
        return self.now().date()
